# pageqa/exceptions.py
"""Error taxonomy.

Only ``ValidationError`` and ``TaskNotFoundError`` ever reach an HTTP caller.
``DispatchError`` is recovered by inline processing; ``RenderError`` and
``AnswerError`` end up on the task's ``error`` field.
"""


class PageQAError(Exception):
    """Base class for all pageqa errors."""


class ValidationError(PageQAError):
    """Required input is missing; raised before any task is stored."""


class TaskNotFoundError(PageQAError):
    def __init__(self, task_id):
        super().__init__(f'Task {task_id} not found')
        self.task_id = task_id


class DispatchError(PageQAError):
    """The task could not be handed to the queue."""


class RenderError(PageQAError):
    """The page text could not be retrieved."""


class AnswerError(PageQAError):
    """The answering collaborator failed unexpectedly."""
