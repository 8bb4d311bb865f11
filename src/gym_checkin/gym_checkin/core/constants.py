"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ATTENDANCE_KIND = "gym_attendance"
QR_DATA_PARAM = "data"

DEFAULT_FACILITY_ID = "1"
DEFAULT_CAMERA_WIDTH = 1280
DEFAULT_CAMERA_HEIGHT = 720
DEFAULT_SCAN_FPS = 30
DEFAULT_API_TIMEOUT_SECONDS = 10.0
DEFAULT_EXPIRING_SOON_DAYS = 7

WEEKLY_LIMIT_CODE = "WEEKLY_LIMIT_REACHED"
