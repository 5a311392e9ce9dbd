from kombu import Queue, Exchange

from pageqa.settings import Settings

_settings = Settings.from_env()

QUEUE_NAME = 'scraper-queue'

# BROKER & RESULT BACKEND
broker_url = _settings.broker_url
result_backend = None
task_ignore_result = True

# Fail fast when the broker is down so the API can fall back to inline processing
broker_connection_timeout = 4
task_publish_retry = True
task_publish_retry_policy = {
    'max_retries': 1,
    'interval_start': 0,
    'interval_step': 0.2,
    'interval_max': 0.5,
}

# FAIR DISPATCH
task_acks_late = True
worker_prefetch_multiplier = 1

# MEMORY MANAGEMENT
worker_max_tasks_per_child = 100
worker_max_memory_per_child = 500000  # KB, a headless browser per job

# TIMEOUTS
task_time_limit = 300
task_soft_time_limit = 240

# SERIALIZATION
task_serializer = 'json'
result_serializer = 'json'
accept_content = ['json']

# QUEUES
task_default_queue = QUEUE_NAME
task_default_exchange = 'scraper'
task_default_routing_key = 'scraper.tasks'

task_queues = (
    Queue(QUEUE_NAME, exchange=Exchange('scraper', type='direct'), routing_key='scraper.tasks'),
)

# ROUTING
task_routes = {
    'pageqa.tasks.process_task_job': {'queue': QUEUE_NAME},
}

# OTHER
timezone = 'UTC'
enable_utc = True
task_track_started = True
task_send_sent_event = True
worker_send_task_events = True
