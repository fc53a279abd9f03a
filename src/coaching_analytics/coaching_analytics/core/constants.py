"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_REFERENCE_TIMEZONE = "Asia/Kolkata"
DEFAULT_MAX_MARKS = 100.0
DEFAULT_LATE_WEIGHT = 0.5

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
