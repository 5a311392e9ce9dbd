# pageqa/dispatch.py
"""Hands newly created tasks to the processor.

``QueuedDispatcher`` sends a Celery job and falls back to inline processing
when the broker rejects it; ``InlineDispatcher`` always processes inline.
Both return the task as it was right after creation (status ``queued``),
even though the inline path has already run it to a terminal state.
"""
import logging

from pageqa import metrics
from pageqa.exceptions import DispatchError

logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(self, store, processor):
        self.store = store
        self.processor = processor

    def submit(self, url, question):
        task = self.store.create(url, question)
        self._dispatch(task)
        return task

    def _dispatch(self, task):
        raise NotImplementedError

    def _run_inline(self, task):
        metrics.tasks_submitted.labels(mode='inline').inc()
        try:
            self.processor.process(task.id, task.url, task.question)
        except Exception:
            # The task was already created; its outcome is only reported by polling
            logger.exception('Inline processing of task %s could not be recorded', task.id)


class InlineDispatcher(Dispatcher):
    def _dispatch(self, task):
        self._run_inline(task)


class QueuedDispatcher(Dispatcher):
    def __init__(self, store, processor, enqueue):
        super().__init__(store, processor)
        self.enqueue = enqueue

    def _dispatch(self, task):
        try:
            self._enqueue(task)
        except DispatchError as exc:
            logger.error('Queue error for task %s: %s', task.id, exc)
            logger.info('Falling back to inline processing for task %s', task.id)
            self._run_inline(task)
        else:
            metrics.tasks_submitted.labels(mode='queued').inc()

    def _enqueue(self, task):
        try:
            self.enqueue(task.id, task.url, task.question)
        except Exception as exc:
            raise DispatchError(str(exc) or exc.__class__.__name__) from exc


def enqueue_celery_job(task_id, url, question):
    from pageqa.tasks import process_task_job

    process_task_job.apply_async(args=[task_id, url, question])


def build_dispatcher(settings, store, processor, enqueue=None):
    """Pick the dispatcher once for the whole process."""
    if settings.queue_enabled:
        logger.info('Using queue at %s:%s', settings.redis_host, settings.redis_port)
        return QueuedDispatcher(store, processor, enqueue or enqueue_celery_job)
    logger.info('No REDIS_HOST provided. Using direct processing mode.')
    return InlineDispatcher(store, processor)
