# pageqa/tasks.py
import logging

from celery.signals import worker_process_init, worker_process_shutdown

from pageqa import celery_app
from pageqa.context import AppContext
from pageqa.logging_setup import setup_logging
from pageqa.settings import Settings

logger = logging.getLogger(__name__)

_worker_context = None


def get_worker_context():
    """Context of this worker process, built on first use"""
    global _worker_context
    if _worker_context is None:
        _worker_context = AppContext.from_settings(Settings.from_env())
    return _worker_context


def set_worker_context(context):
    global _worker_context
    _worker_context = context


@worker_process_init.connect
def init_worker_process(**kwargs):
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    set_worker_context(AppContext.from_settings(settings))


@worker_process_shutdown.connect
def shutdown_worker_process(**kwargs):
    global _worker_context
    if _worker_context is not None:
        _worker_context.close()
        _worker_context = None


@celery_app.task(bind=True, name='pageqa.tasks.process_task_job', max_retries=0)
def process_task_job(self, task_id, url, question):
    """Scrape the page and answer the question for one stored task"""
    logger.info('Job %s picked up task %s', self.request.id, task_id)
    task = get_worker_context().processor.process(task_id, url, question)
    if task is None:
        return {'task_id': task_id, 'status': 'skipped'}
    return {'task_id': task_id, 'status': task.status}
