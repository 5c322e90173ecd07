from docsync.tasks.sync_tasks import (
    health_check_task,
    sync_documentation_task,
)

__all__ = [
    "health_check_task",
    "sync_documentation_task",
]
