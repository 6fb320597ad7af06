import os
import sys
import tempfile
from pathlib import Path

# Keep the local store and label output out of the project tree before any import reads config
_tmp = tempfile.mkdtemp(prefix="stock_intake_tests_")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("STOCK_INTAKE_DATA_DIR", str(Path(_tmp) / "data"))
os.environ.setdefault("STOCK_INTAKE_OUTPUT_DIR", str(Path(_tmp) / "output"))

sys.path.insert(0, str(Path(__file__).resolve().parent))
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
