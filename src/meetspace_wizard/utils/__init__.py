"""Utility modules for the event wizard."""

from meetspace_wizard.utils.backoff import exponential_backoff, retry_with_backoff
from meetspace_wizard.utils.sanitization import (
    clean_list,
    is_absolute_url,
    parse_flag,
    sanitize_input,
    slugify,
)
from meetspace_wizard.utils.timers import (
    AsyncioScheduler,
    Debouncer,
    ManualScheduler,
    Scheduler,
    TimerHandle,
)

__all__ = [
    "exponential_backoff",
    "retry_with_backoff",
    "sanitize_input",
    "is_absolute_url",
    "slugify",
    "clean_list",
    "parse_flag",
    "Scheduler",
    "TimerHandle",
    "ManualScheduler",
    "AsyncioScheduler",
    "Debouncer",
]
