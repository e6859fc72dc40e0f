DOMAIN = "tank_level_monitor"

CONF_TANK_NAME = "tank_name"
CONF_DISTANCE_SENSOR = "distance_sensor"
CONF_TANK_SHAPE = "tank_shape"
CONF_LEVEL_MODEL = "level_model"
CONF_DIAMETER = "diameter_m"
CONF_LENGTH = "length_m"
CONF_WIDTH = "width_m"
CONF_MAX_HEIGHT = "max_height_m"
CONF_CAPACITY = "capacity_l"
CONF_UPPER_LIMIT = "upper_limit"
CONF_LOWER_LIMIT = "lower_limit"
CONF_LIMIT_UNIT = "limit_unit"
CONF_TANKS = "tanks"
CONF_READINGS = "readings"

SHAPE_CYLINDER = "cylinder"
SHAPE_RECTANGULAR = "rectangular"

LEVEL_MODEL_GEOMETRIC = "geometric"
LEVEL_MODEL_LINEAR = "linear"

LIMIT_UNIT_PERCENT = "percent"
LIMIT_UNIT_LITERS = "liters"

DEFAULT_TANK_NAME = "Tank"
DEFAULT_UPPER_LIMIT = 90.0  # Percent
DEFAULT_LOWER_LIMIT = 10.0  # Percent

# Readings older than this are never reported as a live level
STALE_AFTER_MINUTES = 30

# Recompute interval so a silent sensor turns inactive
DEFAULT_SCAN_INTERVAL_SECONDS = 60

# Number of recent readings kept for the min/max/avg window
DEFAULT_READING_HISTORY_SIZE = 30

STATUS_OK = "OK"
STATUS_WARNING = "Warning"
STATUS_INACTIVE = "Inactive"
STATUS_UNKNOWN = "Unknown"

ALERT_NORMAL = "Normal"
ALERT_HIGH_LEVEL = "High level"
ALERT_LOW_LEVEL = "Low level"
ALERT_STALE = f"No reading in last {STALE_AFTER_MINUTES} minutes"
ALERT_NO_DATA = "No Data"
ALERT_NO_VALID_LEVEL = "No valid level"

SERVICE_GET_FLEET_METRICS = "get_fleet_metrics"
SERVICE_GET_TANK_HISTORY = "get_tank_history"
