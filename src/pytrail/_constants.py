"""Internal constants shared across the library."""

from datetime import timedelta

USER_AGENT = "pytrail/1.0"

#: Date format of day-bucket keys.
DAY_FORMAT = "%Y-%m-%d"

#: Day buckets older than this (relative to the sweep instant) are dropped.
RETENTION = timedelta(days=7)

#: Minimum time between two durable flushes of the store.
FLUSH_INTERVAL = timedelta(minutes=5)

DEFAULT_HISTORY_DIR = "history"
HISTORY_FILE_SUFFIX = ".json"
