# pageqa/models.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text

from pageqa.database import Base

QUEUED = 'queued'
PROCESSING = 'processing'
COMPLETED = 'completed'
ERROR = 'error'

STATUSES = (QUEUED, PROCESSING, COMPLETED, ERROR)
TERMINAL_STATUSES = (COMPLETED, ERROR)


class Task(Base):
    __tablename__ = 'tasks'

    id = Column(Integer, primary_key=True, autoincrement=True)
    url = Column(Text, nullable=False)
    question = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=QUEUED)
    scraped_content = Column(Text, nullable=True)
    answer = Column(Text, nullable=True)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    # Fields the processor may write after creation
    MUTABLE_FIELDS = ('status', 'scraped_content', 'answer', 'error')

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    def to_dict(self):
        return {
            'id': self.id,
            'url': self.url,
            'question': self.question,
            'status': self.status,
            'scrapedContent': self.scraped_content,
            'answer': self.answer,
            'error': self.error,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Task id={self.id} status={self.status}>'
