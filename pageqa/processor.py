# pageqa/processor.py
"""Drives one task through ``queued -> processing -> completed | error``.

``processing`` is persisted before the first collaborator call, so a crash
leaves the task visibly stuck there instead of looking queued. Every failure
ends in a persisted ``error`` status; nothing is retried and nothing is
raised back to the caller.
"""
import logging

from pageqa import metrics
from pageqa.exceptions import AnswerError
from pageqa.models import QUEUED, PROCESSING, COMPLETED, ERROR

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 2000
_TRUNCATION_MARKER = '... [truncated]'


def error_message(exc, limit=MAX_ERROR_LENGTH):
    message = str(exc).strip() or exc.__class__.__name__
    if len(message) > limit:
        message = message[:limit - len(_TRUNCATION_MARKER)] + _TRUNCATION_MARKER
    return message


class TaskProcessor:
    def __init__(self, store, renderer, answerer):
        self.store = store
        self.renderer = renderer
        self.answerer = answerer

    def process(self, task_id, url, question):
        """Run the scrape and answer steps; returns the final task or None if skipped."""
        task = self.store.get(task_id)
        if task.status != QUEUED:
            # Duplicate delivery of a job that already ran (or is running)
            logger.warning('Skipping task %s: status is %s', task_id, task.status)
            return None

        logger.info('Processing task %s: %s', task_id, url)
        self.store.update(task_id, status=PROCESSING)

        try:
            content = self.renderer.render(url)
        except Exception as exc:
            logger.exception('Task %s failed while rendering', task_id)
            return self._fail(task_id, exc)

        try:
            self.store.update(task_id, scraped_content=content)
            answer = self.answerer.answer(content, question, url)
            if answer is None:
                raise AnswerError('Answering returned no text')
            task = self.store.update(task_id, status=COMPLETED, answer=answer, error=None)
        except Exception as exc:
            logger.exception('Task %s failed after rendering', task_id)
            return self._fail(task_id, exc)

        metrics.tasks_finished.labels(status=COMPLETED).inc()
        logger.info('Task %s completed', task_id)
        return task

    def _fail(self, task_id, exc):
        task = self.store.update(task_id, status=ERROR, answer=None, error=error_message(exc))
        metrics.tasks_finished.labels(status=ERROR).inc()
        return task
