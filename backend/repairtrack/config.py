# backend/repairtrack/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key (signs the session cookie)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///repairtrack.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Pipeline variant: "hub" (6 stages), "single_site" (5 stages),
    # or an explicit comma-separated list of stage tokens.
    ORDER_PIPELINE = os.environ.get("ORDER_PIPELINE", "hub")
    # Stage that means "goods ready at store"; defaults to the last stage.
    READY_STAGE = os.environ.get("READY_STAGE") or None

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    SERIAL_PREFIX = os.environ.get("SERIAL_PREFIX", "LW")

    # Hub login and the admin password that guards store creation
    HUB_PASSWORD = os.environ.get("HUB_PASSWORD", "hub-dev-password")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin-dev-password")
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # "log" writes messages to the app logger, "twilio" sends WhatsApp messages
    NOTIFIER = os.environ.get("NOTIFIER", "log")
    NOTIFY_WORKERS = int(os.environ.get("NOTIFY_WORKERS", "2"))
    TWILIO_ACCOUNT_SID = os.environ.get("TWILIO_ACCOUNT_SID")
    TWILIO_AUTH_TOKEN = os.environ.get("TWILIO_AUTH_TOKEN")
    TWILIO_WHATSAPP_FROM = os.environ.get("TWILIO_WHATSAPP_FROM")
    TWILIO_TIMEOUT = float(os.environ.get("TWILIO_TIMEOUT", "10"))
