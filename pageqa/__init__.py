# pageqa/__init__.py
from celery import Celery

# Load configuration
celery_app = Celery(__name__)
celery_app.config_from_object('pageqa.celeryconfig')

# Auto-discover tasks
celery_app.autodiscover_tasks(['pageqa'])
