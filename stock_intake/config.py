"""Configuration and settings."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("STOCK_INTAKE_DATA_DIR", str(PROJECT_ROOT / "data")))
OUTPUT_DIR = Path(os.getenv("STOCK_INTAKE_OUTPUT_DIR", str(PROJECT_ROOT / "output")))

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

# Database (local record storage)
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'stock_intake.sqlite'}")

# Record storage backend: "db" (local SQLAlchemy store) or "http" (remote inventory API)
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "db").lower()
STORAGE_API_BASE_URL = os.getenv("STORAGE_API_BASE_URL", "http://localhost:3001").rstrip("/")
STORAGE_API_TOKEN = os.getenv("STORAGE_API_TOKEN", "")
STORAGE_API_TIMEOUT_SECONDS = float(os.getenv("STORAGE_API_TIMEOUT_SECONDS", "30"))

# Labels (mock print renderer appends payloads here)
LABELS_PATH = Path(os.getenv("LABELS_PATH", str(OUTPUT_DIR / "printed_labels.json")))

# Intake defaults
DEFAULT_OPERATOR = os.getenv("DEFAULT_OPERATOR", "system")
MIX_BOX_KEY_PREFIX = os.getenv("MIX_BOX_KEY_PREFIX", "MIX")

# Logging
LOG_DIR = OUTPUT_DIR / "logs"
LOG_FILE = LOG_DIR / "app.jsonl"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE_LOGGING = os.getenv("VERBOSE_LOGGING", "false").lower() == "true"

# Ensure log directory exists
LOG_DIR.mkdir(parents=True, exist_ok=True)
