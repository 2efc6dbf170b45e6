import os
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

API_HOST = os.getenv("EXCEL_VIEWER_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("EXCEL_VIEWER_API_PORT", 5600))

# Where the frontend posts spreadsheets
UPLOAD_URL = os.getenv("EXCEL_VIEWER_UPLOAD_URL", f"http://localhost:{API_PORT}/upload")
UPLOAD_TIMEOUT_SECONDS = float(os.getenv("EXCEL_VIEWER_UPLOAD_TIMEOUT", 60))

MAX_UPLOAD_MB = int(os.getenv("EXCEL_VIEWER_MAX_UPLOAD_MB", 50))
ACCEPTED_EXTENSIONS = (".xlsx", ".xls")

LOG_DIR = os.getenv("EXCEL_VIEWER_LOG_DIR", os.path.join(BASE_DIR, "logs"))
LOG_LEVEL = os.getenv("EXCEL_VIEWER_LOG_LEVEL", "INFO").upper()

THEME_FILE = os.getenv(
    "EXCEL_VIEWER_THEME_FILE",
    os.path.join(os.path.expanduser("~"), ".excel_viewer", "preferences.json"),
)

DATE_FORMAT = os.getenv("EXCEL_VIEWER_DATE_FORMAT", "%Y-%m-%d")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("EXCEL_VIEWER_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
