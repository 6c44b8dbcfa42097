DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
EASE_PRECISION = 2

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

DEFAULT_INTERVAL_DAYS = 1
FIXED_INTERVALS = {
    1: 1,   # first passing recall
    2: 6,   # second passing recall
}

MIN_BOX = 1
MAX_BOX = 5

SECONDS_PER_MINUTE = 60
