"""Access trail for secured files: who touched which path, and how."""
from database import db

def log(action: str, visitor: str, path: str = "", reason: str = ""):
    """Record an event; reason stays empty unless access was refused."""
    with db() as conn:
        conn.execute(
            "INSERT INTO access_log (action, path, visitor, reason) VALUES (?, ?, ?, ?)",
            (action, path, visitor, reason or None)
        )

def get_logs(limit=200):
    with db() as conn:
        rows = conn.execute(
            "SELECT action, path, visitor, reason, timestamp FROM access_log ORDER BY id DESC LIMIT ?",
            (limit,)
        ).fetchall()
    return [dict(row) for row in rows]

def path_history(path: str, limit=50):
    """Events for one secured path, newest first."""
    with db() as conn:
        rows = conn.execute(
            "SELECT action, visitor, reason, timestamp FROM access_log WHERE path = ? ORDER BY id DESC LIMIT ?",
            (path, limit)
        ).fetchall()
    return [dict(row) for row in rows]
