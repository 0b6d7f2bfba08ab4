"""
Custody Registry – Django Settings (Infrastructure Only)
==========================================================
Django serves as the persistence container for the custody registry:
the ORM, migrations and transactions. The registry architecture is
the authority — Django does not dictate structure.

Everything deployment-specific comes from the environment:
    DJANGO_SECRET_KEY       (dev fallback below)
    CUSTODY_AUTHORITY_ID    the registering authority
    CUSTODY_DB_PATH         SQLite file
    CUSTODY_LOG_LEVEL       level of the "custody" logger tree
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
# BASE_DIR = project root (where pyproject.toml lives)
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY", "custody-dev-key-replace-before-deployment"
)

DEBUG = os.environ.get("DJANGO_DEBUG", "0") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── Custody modules ───────────────────────────────────
    "core.event_store",
    "engines.custody",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite by default. Point CUSTODY_DB_PATH elsewhere per deployment.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("CUSTODY_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
# Custody tables declare their keys explicitly. Django fallback only.
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Custody Registry ──────────────────────────────────────────
CUSTODY_AUTHORITY_ID = os.environ.get(
    "CUSTODY_AUTHORITY_ID", "did:custody:manufacturer"
)

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "custody": {
            "handlers": ["console"],
            "level": os.environ.get("CUSTODY_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
