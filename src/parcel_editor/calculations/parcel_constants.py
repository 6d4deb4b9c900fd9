"""
Parcel Constants - Business rules and interaction tuning values for the parcel editor
"""

# Area rules
MINIMUM_AREA_METERS_SQUARED = 4046.86  # 1 acre
SQUARE_METERS_TO_ACRES = 0.000247105
SQUARE_FEET_PER_ACRE = 43560

# Default parcel placed on a tap (meters)
DEFAULT_WIDTH_METERS = 20.0
DEFAULT_HEIGHT_METERS = 20.0

# Uniform scaling never collapses below this factor
MIN_SCALE_FACTOR = 0.01

# Rotation handle sits beyond the top edge by this fraction of the height
ROTATION_HANDLE_OFFSET_FRACTION = 0.15

# Interaction tuning
HIT_TEST_RADIUS_PX = 15.0
DRAG_UPDATE_DEBOUNCE_MS = 16  # ~60 Hz

# Renderer colors (ARGB hex strings accepted by QColor)
PRIMARY_COLOR = "#00D9FF"
SELECTED_FILL_COLOR = "#FFD54F"
SELECTED_LINE_COLOR = "#FFA000"
SIDE_HANDLE_COLOR = "#FF0000"
ROTATION_HANDLE_COLOR = "#0000FF"
HANDLE_STROKE_COLOR = "#FFFFFF"
SAVED_PARCEL_COLOR = "#2196F3"
