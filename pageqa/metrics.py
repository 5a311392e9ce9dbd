# pageqa/metrics.py
import os

import psutil
from prometheus_client import Counter, Gauge

container_cpu = Gauge('container_cpu_percent', 'CPU usage percentage')
container_memory = Gauge('container_memory_bytes', 'Memory usage in bytes')
container_memory_percent = Gauge('container_memory_percent', 'Memory usage percentage')

tasks_submitted = Counter(
    'pageqa_tasks_submitted_total', 'Tasks accepted by the API', ['mode']
)
tasks_finished = Counter(
    'pageqa_tasks_finished_total', 'Tasks that reached a terminal status', ['status']
)


def refresh_process_gauges():
    process = psutil.Process(os.getpid())
    container_cpu.set(process.cpu_percent(interval=0.1))
    container_memory.set(process.memory_info().rss)
    container_memory_percent.set(process.memory_percent())
