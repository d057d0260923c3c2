"""Configuration for SecureDrop Files."""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

# Flask
SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")
MAX_CONTENT_LENGTH = 25 * 1024 * 1024  # 25 MB

# Paths
DATA_DIR = BASE_DIR / "data"
STORE_PATH = Path(os.environ.get("SECURED_STORE_PATH", DATA_DIR / "securedfiles"))
# Directory the generated read.py must be able to import this project from
BOOTSTRAP_PATH = Path(os.environ.get("SECURED_BOOTSTRAP_PATH", BASE_DIR))
DB_PATH = Path(os.environ.get("SECURED_DB_PATH", DATA_DIR / "app.db"))

# Addressing and key material
HASH_METHOD = os.environ.get("SECURED_HASH_METHOD", "md5")
ENCODE_METHOD = "aes128"
INITIALIZATION_VECTOR = os.environ.get("SECURED_IV", "1234567812345678")
PRIVATE_KEY = os.environ.get("SECURED_PRIVATE_KEY", "67141ABCE7159153")
URL_KEY_ARG = "k"
DOWNLOAD_FLAG = "d=1"
BASE_KEY_LENGTH = int(os.environ.get("SECURED_BASE_KEY_LENGTH", "16"))

# Bootstrap artifacts written into STORE_PATH
CONTROL_DESCRIPTOR_NAME = ".htaccess"
RENDER_SCRIPT_NAME = "read.py"
AUTOLOADER_PLACEHOLDER = "%autoloader%"

# Generic messages shown on failed verification
ERROR_UNAVAILABLE = "Resource unavailable"
ERROR_BAD_KEY = "Incorrect security parameter"
