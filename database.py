"""sqlite access trail for SecureDrop Files."""
import sqlite3
from contextlib import contextmanager

import config


def get_connection():
    config.DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(config.DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn

@contextmanager
def db():
    """Connection committed on success, rolled back if the block raises."""
    conn = get_connection()
    try:
        yield conn
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        conn.close()

def init_db():
    with db() as conn:
        # One row per add, delete, read, download or refused access
        conn.execute("""
            CREATE TABLE IF NOT EXISTS access_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                action TEXT NOT NULL CHECK(action IN (
                    'secured_add', 'secured_delete', 'secured_read',
                    'secured_download', 'secured_denied')),
                path TEXT NOT NULL,
                visitor TEXT NOT NULL,
                reason TEXT,
                timestamp TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.execute("CREATE INDEX IF NOT EXISTS idx_access_log_path ON access_log (path)")
