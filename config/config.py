"""Shared helpers for the per-environment settings modules."""
import os


def env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


def db_config(default_password: str = "") -> dict:
    """mysql-connector kwargs for the optional MySQL remote backend."""
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "mediguard"),
        "connection_timeout": int(env_float("REMOTE_TIMEOUT_SECONDS", 10.0)),
    }
