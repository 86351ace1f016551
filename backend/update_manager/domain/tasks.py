"""Task queue vocabulary.

The queue writes ``pending`` and ``in_progress``. Terminal statuses are stored
as the agent reports them; ``completed`` and ``failed`` are the usual ones,
and anything else is grouped as ``other`` in metrics.
"""

TASK_PENDING = "pending"
TASK_IN_PROGRESS = "in_progress"
TASK_COMPLETED = "completed"
TASK_FAILED = "failed"
TASK_STATUSES = (TASK_PENDING, TASK_IN_PROGRESS, TASK_COMPLETED, TASK_FAILED)
OTHER_STATUS_LABEL = "other"


def status_label(status: str) -> str:
    """Metric label for a reported status, bounded to the known vocabulary."""
    return status if status in TASK_STATUSES else OTHER_STATUS_LABEL
