# pageqa/store.py
"""Durable task records.

Every method opens its own session and commits before returning, so a
successful return means the change is persisted. Updates are a plain
field merge (last write wins); only the processor mutates a task after
creation.
"""
import logging
from datetime import datetime

from sqlalchemy import func

from pageqa.database import get_db_context
from pageqa.exceptions import TaskNotFoundError
from pageqa.models import Task, QUEUED, STATUSES

logger = logging.getLogger(__name__)

# Largest id a signed 64-bit primary key can hold
MAX_TASK_ID = 2 ** 63 - 1


def _check_id(task_id):
    if not 1 <= task_id <= MAX_TASK_ID:
        raise TaskNotFoundError(task_id)


class TaskStore:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    def create(self, url, question):
        now = datetime.utcnow()
        with get_db_context(self._session_factory) as db:
            task = Task(
                url=url,
                question=question,
                status=QUEUED,
                created_at=now,
                updated_at=now,
            )
            db.add(task)
            db.commit()
            db.refresh(task)
        logger.debug('Created task %s for %s', task.id, url)
        return task

    def get(self, task_id):
        _check_id(task_id)
        with get_db_context(self._session_factory) as db:
            task = db.get(Task, task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            return task

    def update(self, task_id, **fields):
        """Merge ``fields`` into the task and refresh ``updated_at``."""
        unknown = set(fields) - set(Task.MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f'Cannot update fields: {", ".join(sorted(unknown))}')
        if 'status' in fields and fields['status'] not in STATUSES:
            raise ValueError(f'Unknown status: {fields["status"]}')
        _check_id(task_id)

        with get_db_context(self._session_factory) as db:
            task = db.get(Task, task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            for name, value in fields.items():
                setattr(task, name, value)
            task.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(task)
            return task

    def count(self):
        with get_db_context(self._session_factory) as db:
            return db.query(Task).count()

    def count_by_status(self):
        with get_db_context(self._session_factory) as db:
            rows = db.query(Task.status, func.count(Task.id)).group_by(Task.status).all()
        counts = {status: 0 for status in STATUSES}
        counts.update({status: total for status, total in rows})
        return counts

    def recent(self, limit=20):
        with get_db_context(self._session_factory) as db:
            return (
                db.query(Task)
                .order_by(Task.created_at.desc(), Task.id.desc())
                .limit(limit)
                .all()
            )
