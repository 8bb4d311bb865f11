SECRET_KEY = "test-secret"

API_BASE_URL = "http://backend.test/api"
API_TIMEOUT_SECONDS = 2.0
API_TOKEN = None

FACILITY_ID = "1"
QR_LINK_BASE_URL = "http://backend.test/api/attendance/check-in"

CAMERA_DEVICE = 0
CAMERA_WIDTH = 1280
CAMERA_HEIGHT = 720
SCAN_FPS = 30

EXPIRING_SOON_DAYS = 7
QUOTA_PRECHECK = False

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
