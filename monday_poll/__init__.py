# ---------------------------------------------------------------------------
# Public library API – import-light facade
# ---------------------------------------------------------------------------

from .app import App, AppConfig  # noqa: F401
from .errors import AppError, PollError, StateUnavailable, StorageFailure  # noqa: F401
from .models import Question, Summary  # noqa: F401
from .store import RecordStore  # noqa: F401

__all__ = [
    "App",
    "AppConfig",
    "AppError",
    "PollError",
    "Question",
    "RecordStore",
    "StateUnavailable",
    "StorageFailure",
    "Summary",
]
