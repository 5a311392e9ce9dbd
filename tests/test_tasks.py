# tests/test_tasks.py
import pytest

from pageqa import tasks
from pageqa.celeryconfig import QUEUE_NAME, task_routes


@pytest.fixture()
def worker_context(context):
    tasks.set_worker_context(context)
    yield context
    tasks.set_worker_context(None)


def test_job_processes_the_stored_task(worker_context, answerer):
    task = worker_context.store.create('https://example.com', 'What is this page about?')

    result = tasks.process_task_job(task.id, task.url, task.question)

    assert result == {'task_id': task.id, 'status': 'completed'}
    assert worker_context.store.get(task.id).answer == answerer.text


def test_redelivered_job_is_skipped(worker_context, renderer):
    task = worker_context.store.create('https://example.com', 'q')

    tasks.process_task_job(task.id, task.url, task.question)
    result = tasks.process_task_job(task.id, task.url, task.question)

    assert result == {'task_id': task.id, 'status': 'skipped'}
    assert len(renderer.calls) == 1


def test_job_is_routed_to_the_scraper_queue():
    assert task_routes[tasks.process_task_job.name] == {'queue': QUEUE_NAME}
