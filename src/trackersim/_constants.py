"""Internal constants shared across the simulator."""

DEFAULT_BROKER_HOST = "test.mosquitto.org"
DEFAULT_BROKER_PORT = 1883
DEFAULT_NAMESPACE = "rsps"
DEFAULT_KEEPALIVE = 60

DEFAULT_TRACKER_ID = "001"
DEFAULT_INTERVAL_MS = 2000
DEFAULT_START_LATITUDE = 42.6977  # Sofia, Bulgaria
DEFAULT_START_LONGITUDE = 23.3219
DEFAULT_START_ALTITUDE = 550.0

# Riding speed applied when motion is toggled on (km/h).
DEFAULT_RIDING_SPEED = 15.0

# ------------------------------------------------------------------
# Dead reckoning
# ------------------------------------------------------------------

KM_PER_DEGREE = 111.0
MS_PER_HOUR = 1000 * 60 * 60

# Full jitter width; applied as (random() - 0.5) * amplitude.
LAT_LNG_JITTER = 0.00001
ALTITUDE_JITTER = 0.5
SPEED_JITTER = 0.5

LAT_LNG_DECIMALS = 6
ALTITUDE_SPEED_DECIMALS = 1
