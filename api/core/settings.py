"""
Environment-driven settings.

Every value is read at call time so tests can monkeypatch the environment.
Malformed numeric values fall back to the default instead of failing startup.
"""

from __future__ import annotations

import os

DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()


def cors_origins() -> list[str]:
    return env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)


# Cookies

def session_cookie_name() -> str:
    return env_str("SESSION_COOKIE_NAME", "session_token")


def session_cookie_max_age_s() -> int:
    return env_int("SESSION_COOKIE_DAYS", 60) * 24 * 60 * 60


def staff_session_max_age_s() -> int:
    return env_int("STAFF_SESSION_HOURS", 8) * 60 * 60


def cookie_secure() -> bool:
    return env_bool("COOKIE_SECURE", True)


def cookie_samesite() -> str:
    value = env_str("COOKIE_SAMESITE", "none").lower()
    return value if value in {"lax", "strict", "none"} else "none"


# Marketplace rules

def product_edit_window_minutes() -> int:
    return env_int("PRODUCT_EDIT_WINDOW_MINUTES", 30)


def max_image_upload_bytes() -> int:
    return env_int("MAX_IMAGE_UPLOAD_BYTES", 5 * 1024 * 1024)


def commission_rate() -> float:
    return env_float("COMMISSION_RATE", 0.05)


# Admin

def admin_username() -> str:
    return env_str("ADMIN_USERNAME", "admin")


def admin_password() -> str:
    # Empty means the direct admin login is disabled.
    return os.environ.get("ADMIN_PASSWORD", "")


def admin_principal_id() -> str:
    return env_str("ADMIN_PRINCIPAL_ID", "site_admin")


# Startup

def schema_auto_create() -> bool:
    return env_bool("SCHEMA_AUTO_CREATE", True)


def seed_demo_data() -> bool:
    return env_bool("SEED_DEMO_DATA", False)


def support_seed_password() -> str:
    return os.environ.get("SUPPORT_SEED_PASSWORD", "")
