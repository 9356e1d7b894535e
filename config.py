import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored beside the code as swimslot.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "swimslot.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Wall-clock zone for slot dates, class end times and "today"
    ACADEMY_TIMEZONE = os.getenv("ACADEMY_TIMEZONE", "America/Lima")

    # Temporary reservation window
    LOCK_TTL_MINUTES = int(os.getenv("LOCK_TTL_MINUTES", "15"))

    # Settlement sweep: how far back to look, and how often to run
    SETTLEMENT_WINDOW_DAYS = int(os.getenv("SETTLEMENT_WINDOW_DAYS", "7"))
    SETTLEMENT_INTERVAL_MINUTES = int(os.getenv("SETTLEMENT_INTERVAL_MINUTES", "15"))
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"

    # Optimistic-conflict retries per booking transaction
    TRANSACTION_MAX_RETRIES = int(os.getenv("TRANSACTION_MAX_RETRIES", "5"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
