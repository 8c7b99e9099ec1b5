# --- Record grammar ---

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
DAY_FORMAT = "%Y-%m-%d"

TIMESTAMP_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}$"
COUNT_PATTERN = r"^[0-9]+$"
RECORD_PATTERN = r"^\s*(\S+)\s+(\S+)\s*$"

# Counts are stored as Int64 in the polars strategy
MAX_COUNT = 2**63 - 1

# --- Report defaults ---

BUCKET_SECONDS = 30 * 60
DEFAULT_TOP_K = 3
DEFAULT_WINDOW_SECONDS = 3 * BUCKET_SECONDS
DEFAULT_LOWEST_WINDOWS = 3
