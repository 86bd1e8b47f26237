import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".studyisland"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

def load_config() -> Dict[str, Any]:
    """Load config from ~/.studyisland/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # Load .env for overrides (e.g., REMOTE_URL env var)
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)
    # Support legacy flat keys while preferring nested tables
    legacy_passing = config.get("passing_score")

    defaults_cfg = config.get("defaults", {})
    config["defaults"] = {
        "passing_score": int(os.getenv(
            "PASSING_SCORE",
            defaults_cfg.get("passing_score", legacy_passing if legacy_passing is not None else 80)
        )),
    }
    remote_cfg = config.get("remote", {})
    config["remote"] = {
        "url": os.getenv("REMOTE_URL", remote_cfg.get("url", "")),
        "timeout": float(os.getenv("REMOTE_TIMEOUT", remote_cfg.get("timeout", 20))),
    }
    server_cfg = config.get("server", {})
    config["server"] = {
        "host": os.getenv("STUDYISLAND_HOST", server_cfg.get("host", "127.0.0.1")),
        "port": int(os.getenv("STUDYISLAND_PORT", server_cfg.get("port", 8000))),
    }
    return config

def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('remote', 'url')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value
