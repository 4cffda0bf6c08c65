from pathlib import Path
import os
from dotenv import load_dotenv
load_dotenv()

BASE = Path(__file__).resolve().parents[1]
DB_PATH = os.getenv("DB_PATH", str(BASE / "data/cart.db"))
DB_WRITE_RETRIES = int(os.getenv("DB_WRITE_RETRIES", "5"))
DB_WRITE_TIMEOUT = float(os.getenv("DB_WRITE_TIMEOUT", "5.0"))
DB_BUSY_TIMEOUT = float(os.getenv("DB_BUSY_TIMEOUT", "0.05"))
DB_BACKOFF_BASE = float(os.getenv("DB_BACKOFF_BASE", "0.01"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
