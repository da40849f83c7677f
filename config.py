import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./invoicing.db")
    API_PREFIX = data.get("API_PREFIX", "")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Object storage (MinIO / S3)
    MINIO_ENDPOINT = data.get("MINIO_ENDPOINT", "localhost:9000")
    MINIO_ACCESS_KEY = data.get("MINIO_ACCESS_KEY", "minioadmin")
    MINIO_SECRET_KEY = data.get("MINIO_SECRET_KEY", "minioadmin")
    MINIO_SECURE = bool(data.get("MINIO_SECURE", False))
    INVOICE_BUCKET = data.get("INVOICE_BUCKET", "medical-invoices")

    # Invoice documents
    INVOICE_DUE_DAYS = data.get("INVOICE_DUE_DAYS", 30)
    CURRENCY_SUFFIX = data.get("CURRENCY_SUFFIX", "FCFA")
    DEFAULT_CLINIC_NAME = data.get("DEFAULT_CLINIC_NAME", "Clinique Médicale")

    # Domain events
    EVENT_WEBHOOK_URL = data.get("EVENT_WEBHOOK_URL", None)

    # Overdue reminder worker
    OVERDUE_REMINDER_ENABLED = bool(data.get("OVERDUE_REMINDER_ENABLED", True))
    OVERDUE_REMINDER_INTERVAL_SECONDS = data.get("OVERDUE_REMINDER_INTERVAL_SECONDS", 3600)
