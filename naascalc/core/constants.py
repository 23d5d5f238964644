"""
core/constants.py - Engine-wide constants.
"""

# Dependency marker meaning "every other currently enabled component"
WILDCARD = "*"

# Device count assumed for support pricing when capital data is missing
DEFAULT_DEVICE_COUNT = 10

# Level reported for component keys outside the catalog
UNKNOWN_LEVEL = 999

# Timing defaults (milliseconds)
DEFAULT_DEBOUNCE_MS = 50
DEFAULT_RETRY_DELAY_MS = 100
DEFAULT_QUEUE_CHECK_MS = 10

# History defaults
DEFAULT_MAX_HISTORY_SIZE = 50
DEFAULT_RECENT_BATCHES = 5
DEFAULT_MAX_ERROR_LOG = 100

# Cascade priority given to dependents of a finished component
DEPENDENCY_PRIORITY = 1

TOTAL_FIELDS = ("monthly", "annual", "three_year", "one_time")
