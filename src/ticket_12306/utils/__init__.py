"""工具包"""

from .config import Settings, get_settings
from .date_utils import validate_date, get_today
from .time_utils import (
    parse_clock,
    duration_to_minutes,
    format_duration,
    parse_time_window,
    parse_duration_limit,
)

__all__ = [
    "Settings",
    "get_settings",
    "validate_date",
    "get_today",
    "parse_clock",
    "duration_to_minutes",
    "format_duration",
    "parse_time_window",
    "parse_duration_limit",
]
