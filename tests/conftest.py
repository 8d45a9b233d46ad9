import os
import tempfile

# Settings are read once on first import, so pin them before any test module loads smartpark.
_DB_DIR = tempfile.mkdtemp(prefix="smartpark_test_")
os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{_DB_DIR}/smartpark_test.db")
os.environ["SMARTPARK_TIMEZONE"] = "Asia/Kolkata"
os.environ.setdefault("AUTO_CREATE_DB", "true")
os.environ.setdefault("AUTO_SEED_RATES", "true")
