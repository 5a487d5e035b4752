"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000.0

DEFAULT_TERRITORY_RADIUS_METERS = 10_000.0
DEFAULT_WORK_START_HOUR = 10
DEFAULT_LATE_GRACE_MINUTES = 15

DEFAULT_VIOLATION_COOLDOWN_SECONDS = 15 * 60
DEFAULT_PERIODIC_INTERVAL_SECONDS = 10 * 60
DEFAULT_LOCATION_TIMEOUT_SECONDS = 10.0
DEFAULT_LOCATION_MAX_AGE_SECONDS = 30.0

# Location naming: presets are searched within the ceiling, but only a preset
# strictly closer than the match radius gives its name to a sample.
NAME_SEARCH_CEILING_METERS = 15_000.0
NAME_MATCH_RADIUS_METERS = 10_000.0
UNKNOWN_LOCATION_LABEL = "Unknown Location"
OFF_TERRITORY_LABEL = "Off-Territory Area"

SOS_FALLBACK_LAT = 0.0
SOS_FALLBACK_LNG = 0.0

DEFAULT_HISTORY_LIMIT = 50

# Iteration order matters: the first preset wins distance ties.
TERRITORY_PRESETS = {
    "Mumbai - South": (18.9220, 72.8347),
    "Mumbai - Bandra": (19.0596, 72.8295),
    "Mumbai - Andheri": (19.1136, 72.8697),
    "Mumbai - Borivali": (19.2307, 72.8567),
    "Pune - Central": (18.5204, 73.8567),
    "Delhi - Connaught Place": (28.6315, 77.2167),
    "Bangalore - MG Road": (12.9716, 77.5946),
    "Hyderabad - Gachibowli": (17.4401, 78.3489),
}
