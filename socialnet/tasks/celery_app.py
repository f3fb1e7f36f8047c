"""
Celery application configuration for background task processing.

This provides:
1. Celery app initialization
2. Redis broker configuration
3. Task routing for outbound email
"""

from celery import Celery

from socialnet.config import settings

# Create Celery instance
celery_app = Celery(
    "socialnet",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["socialnet.tasks.email_tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task execution settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task routing
    task_routes={
        "socialnet.tasks.email_tasks.*": {"queue": "email"},
    },
    # Task result settings
    result_expires=3600,  # 1 hour
    task_ignore_result=True,
    # Worker settings
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    worker_max_tasks_per_child=1000,
)

if __name__ == "__main__":
    celery_app.start()
