import json
import logging
import sqlite3
import zipfile
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from pydantic.alias_generators import to_camel

from config import CONFIG_PATH
from models import AppState, Settings
from utils.sanitize import STATE_KEYS, sanitize_state
from .schema import SCHEMA_SQL, SCHEMA_VERSION

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".studyisland"
DB_PATH = CONFIG_DIR / "studyisland.db"
BACKUP_DIR = CONFIG_DIR / "backups"
BACKUP_KEEP = 7

def init_db():
    """Initialize the database by creating tables if they don't exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    with get_conn() as conn:
        conn.executescript(SCHEMA_SQL)
        ensure_schema_version(conn)
        conn.commit()
    run_daily_backup()

def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the SQLite schema version from PRAGMA user_version."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA user_version")
    row = cursor.fetchone()
    return int(row[0]) if row else 0

def set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Set the SQLite schema version via PRAGMA user_version."""
    conn.execute(f"PRAGMA user_version = {int(version)}")

def ensure_schema_version(conn: sqlite3.Connection) -> None:
    """Ensure the current schema version is written to the database."""
    current = get_schema_version(conn)
    if current != SCHEMA_VERSION:
        set_schema_version(conn, SCHEMA_VERSION)

def load_blobs(conn: sqlite3.Connection) -> Dict[str, str]:
    """Raw stored text per state key; absent keys are simply missing."""
    cursor = conn.cursor()
    cursor.execute("SELECT key, value FROM state_blobs")
    return {row["key"]: row["value"] for row in cursor.fetchall() if row["key"] in STATE_KEYS}

def save_blob(conn: sqlite3.Connection, key: str, value: str) -> None:
    if key not in STATE_KEYS:
        raise ValueError(f"Unknown state key: {key}")
    conn.execute(
        """
        INSERT INTO state_blobs (key, value, updated_at)
        VALUES (?, ?, datetime('now'))
        ON CONFLICT(key) DO UPDATE SET
            value = excluded.value,
            updated_at = excluded.updated_at
        """,
        (key, value),
    )

def load_state(conn: sqlite3.Connection, default_settings: Optional[Settings] = None) -> AppState:
    """Load all six blobs; each missing or corrupt blob falls back to its own default."""
    blobs = load_blobs(conn)
    missing = [key for key in STATE_KEYS if key not in blobs]
    if missing:
        logger.debug("No stored value for %s, using defaults", ", ".join(missing))
    return sanitize_state(blobs, default_settings)

def save_state(conn: sqlite3.Connection, state: AppState) -> None:
    """Serialize each piece of state independently and commit."""
    wire = state.to_wire()
    for key in STATE_KEYS:
        save_blob(conn, key, json.dumps(wire[to_camel(key)], ensure_ascii=False))
    conn.commit()

def build_backup_manifest(schema_version: int) -> dict:
    """Build a manifest for backups with timestamp and schema version."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "schema_version": schema_version,
    }

def create_backup_archive_file(destination: Path, schema_version: int) -> None:
    """Create a backup zip archive at the given destination."""
    if not DB_PATH.exists():
        raise FileNotFoundError("studyisland.db not found")
    manifest = build_backup_manifest(schema_version)
    destination.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as zipf:
        zipf.writestr("manifest.json", json.dumps(manifest, indent=2))
        zipf.write(DB_PATH, arcname="studyisland.db")
        if CONFIG_PATH.exists():
            zipf.write(CONFIG_PATH, arcname="config.toml")

def run_daily_backup() -> None:
    """Create a daily rolling backup of the DB/config and prune old archives."""
    if not DB_PATH.exists():
        return
    BACKUP_DIR.mkdir(parents=True, exist_ok=True)
    today = date.today()
    existing = sorted(BACKUP_DIR.glob("*.zip"), key=lambda path: path.stat().st_mtime, reverse=True)
    if existing:
        latest_date = date.fromtimestamp(existing[0].stat().st_mtime)
        if latest_date == today:
            return
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    backup_path = BACKUP_DIR / f"backup-{timestamp}.zip"
    with get_conn() as conn:
        schema_version = get_schema_version(conn)
    create_backup_archive_file(backup_path, schema_version)
    logger.info("Wrote daily backup %s", backup_path.name)
    existing = sorted(BACKUP_DIR.glob("*.zip"), key=lambda path: path.stat().st_mtime, reverse=True)
    for old_backup in existing[BACKUP_KEEP:]:
        old_backup.unlink(missing_ok=True)

@contextmanager
def get_conn():
    """Context manager for SQLite connection, using row_factory for dict-like rows."""
    conn = sqlite3.connect(DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()

def get_db():
    """FastAPI dependency that yields a DB connection and closes it afterwards."""
    with get_conn() as conn:
        yield conn
