"""
Celery Application Configuration
================================

Celery runs documentation syncs outside the HTTP request cycle:
- Scheduled syncs from GitHub (Celery Beat, hourly)
- Syncs triggered from the admin API with background=true
- Periodic health checks

Running Workers:
----------------
Development:
    celery -A docsync.celery_app worker --loglevel=info -Q maintenance

For scheduled tasks, also run Celery Beat:
    celery -A docsync.celery_app beat --loglevel=info

Production Considerations:
--------------------------
- Run a single sync worker (--concurrency=1); two syncs of the same source
  are safe but waste GitHub rate limit
- Use separate Redis databases for the broker and the navigation cache
- Monitor the maintenance queue depth
"""

import logging
from celery import Celery
from celery.schedules import crontab
from celery.signals import worker_process_init, worker_process_shutdown
from docsync.config import settings

logger = logging.getLogger(__name__)

# =============================================================================
# Celery Application Instance
# =============================================================================

celery_app = Celery(
    "docsync",
    broker=settings.celery_broker,  # Redis as message broker
    backend=settings.celery_backend,  # Redis for storing task results
    include=[
        "docsync.tasks.sync_tasks",
    ],
)

# =============================================================================
# Celery Configuration
# =============================================================================

celery_app.conf.update(
    # --- Serialization ---
    # JSON is human-readable and secure (no pickle exploits)
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # --- Result Backend ---
    result_expires=3600,  # Results expire after 1 hour (saves Redis memory)
    result_extended=True,  # Store task args/kwargs in result for debugging

    # --- Task Reliability ---
    task_acks_late=True,  # Ack after task completes, not when received
    task_reject_on_worker_lost=True,  # Re-queue if worker dies mid-task
    task_track_started=True,  # Track when tasks start (for monitoring)
    task_time_limit=1800,  # Hard kill after 30 minutes
    task_soft_time_limit=1500,  # Raise SoftTimeLimitExceeded at 25 min

    # --- Worker Settings ---
    worker_prefetch_multiplier=1,  # Fetch 1 task at a time (fair distribution)
    worker_max_tasks_per_child=100,  # Restart worker after 100 tasks (memory)

    # --- Broker Connection ---
    broker_connection_retry_on_startup=True,
    broker_connection_retry=True,
    broker_connection_max_retries=10,
)


# =============================================================================
# Task Routing
# =============================================================================

celery_app.conf.task_routes = {
    "docsync.tasks.sync_tasks.*": {"queue": "maintenance"},
}

# =============================================================================
# Celery Beat Schedule (Periodic Tasks)
# =============================================================================
# Requires running: celery -A docsync.celery_app beat

celery_app.conf.beat_schedule = {
    # Incremental sync from GitHub; unchanged files cost one listing entry
    "sync-documentation-hourly": {
        "task": "docsync.tasks.sync_tasks.sync_documentation",
        "schedule": crontab(minute=0),
        "kwargs": {"force": False},
    },

    # Health check - verifies database and Redis are reachable
    "health-check-every-5-minutes": {
        "task": "docsync.tasks.sync_tasks.health_check",
        "schedule": crontab(minute="*/5"),
    },
}


# =============================================================================
# Worker Lifecycle Hooks
# =============================================================================


@worker_process_init.connect
def init_worker(**kwargs):
    """Called when a worker process starts."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Celery worker process starting...")


@worker_process_shutdown.connect
def shutdown_worker(**kwargs):
    """Called when a worker process shuts down."""
    logger.info("Celery worker process shutting down...")


# Allow running celery directly: python -m docsync.celery_app
if __name__ == "__main__":
    celery_app.start()
