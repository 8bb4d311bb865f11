import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

API_BASE_URL = os.getenv("API_BASE_URL", "https://olimpoweb-backend.onrender.com/api")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))
API_TOKEN = os.getenv("API_TOKEN")

FACILITY_ID = os.getenv("FACILITY_ID", "1")
QR_LINK_BASE_URL = os.getenv("QR_LINK_BASE_URL", f"{API_BASE_URL}/attendance/check-in")

CAMERA_DEVICE = int(os.getenv("CAMERA_DEVICE", "0"))
CAMERA_WIDTH = int(os.getenv("CAMERA_WIDTH", "1280"))
CAMERA_HEIGHT = int(os.getenv("CAMERA_HEIGHT", "720"))
SCAN_FPS = int(os.getenv("SCAN_FPS", "30"))

EXPIRING_SOON_DAYS = int(os.getenv("EXPIRING_SOON_DAYS", "7"))
QUOTA_PRECHECK = bool(int(os.getenv("QUOTA_PRECHECK", "0")))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
