# backend/posgo/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the instance folder
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///posgo.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Store defaults, copied into StoreSettings the first time it is read
    POS_STORE_NAME = os.environ.get("POS_STORE_NAME", "PosGo!")
    POS_CURRENCY = os.environ.get("POS_CURRENCY", "S/.")
    POS_TAX_RATE = float(os.environ.get("POS_TAX_RATE", "0.18"))  # IGV
    POS_PRICES_INCLUDE_TAX = _env_bool("POS_PRICES_INCLUDE_TAX", True)

    POS_LOW_STOCK_THRESHOLD = int(os.environ.get("POS_LOW_STOCK_THRESHOLD", "5"))
