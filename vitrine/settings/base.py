# vitrine/settings/base.py
from __future__ import annotations
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

# Optionnel en dev, inerte si .env absent
_dotenv_path = find_dotenv(filename=os.getenv("DOTENV_FILE", ".env"), usecwd=True)
if _dotenv_path:
    load_dotenv(_dotenv_path, override=False)

BASE_DIR = Path(__file__).resolve().parents[2]  # .../vitrine

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return bool(default)
    return str(value).strip().lower() in _TRUE_VALUES


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return int(default)


# --------------------------------------------------------------------------------------
# Clés & debug
# --------------------------------------------------------------------------------------
SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_DEV_ONLY")
DEBUG = False  # Par défaut: sécurisé. Dev.py le passera à True.

ALLOWED_HOSTS: list[str] = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "").split(",") if h.strip()]

# --------------------------------------------------------------------------------------
# Apps
# --------------------------------------------------------------------------------------
DJANGO_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
]

LOCAL_APPS = [
    "apps.htmlclient.apps.HtmlClientConfig",
]

INSTALLED_APPS = DJANGO_APPS + LOCAL_APPS

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.locale.LocaleMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "vitrine.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
                "django.template.context_processors.i18n",
            ],
        },
    },
]

WSGI_APPLICATION = "vitrine.wsgi.application"

# --------------------------------------------------------------------------------------
# Database (100% Django, configurable via env)
# --------------------------------------------------------------------------------------
DB_ENGINE = os.getenv("DB_ENGINE", "sqlite3")
if DB_ENGINE == "sqlite3":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": os.getenv("DB_NAME", "vitrine_db"),
            "USER": os.getenv("DB_USER", "vitrine"),
            "PASSWORD": os.getenv("DB_PASSWORD", ""),
            "HOST": os.getenv("DB_HOST", "127.0.0.1"),
            "PORT": os.getenv("DB_PORT", "5432"),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# --------------------------------------------------------------------------------------
# I18N / TZ
# --------------------------------------------------------------------------------------
LANGUAGE_CODE = "en"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

LANGUAGES = [
    ("en", "English"),
    ("fr", "French"),
]

LOCALE_PATHS = [BASE_DIR / "locale"]

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# --------------------------------------------------------------------------------------
# Sécurité (par défaut sûrs; dev.py relâche)
# --------------------------------------------------------------------------------------
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SAMESITE = "Lax"
SECURE_SSL_REDIRECT = env_flag("SECURE_SSL_REDIRECT", default=True)
X_FRAME_OPTIONS = "DENY"

# --------------------------------------------------------------------------------------
# Email (depuis env)
# --------------------------------------------------------------------------------------
EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "shop@example.com")
EMAIL_HOST = os.getenv("EMAIL_HOST", "localhost")
EMAIL_PORT = _int_env("EMAIL_PORT", 25)
EMAIL_USE_TLS = env_flag("EMAIL_USE_TLS", default=False)
EMAIL_HOST_USER = os.getenv("EMAIL_HOST_USER")
EMAIL_HOST_PASSWORD = os.getenv("EMAIL_HOST_PASSWORD")

# --------------------------------------------------------------------------------------
# Cache Redis (fragments HTML + sessions)
# --------------------------------------------------------------------------------------
REDIS_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/3")

CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": REDIS_URL,
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
            "COMPRESSOR": "django_redis.compressors.zlib.ZlibCompressor",
            "IGNORE_EXCEPTIONS": True,  # pas de 500 si Redis down
        },
        "KEY_PREFIX": "vitrine",
        "TIMEOUT": 300,
    }
}

SESSION_ENGINE = "django.contrib.sessions.backends.cached_db"

# --------------------------------------------------------------------------------------
# Clients HTML
# --------------------------------------------------------------------------------------
HTMLCLIENT_SITE_ID = os.getenv("HTMLCLIENT_SITE_ID", "default")
# Surcharges de configs/htmlclient/config.yml (deep-merge), ex:
# {"client": {"html": {"basket": {"related": {"basket-add": True}}}}}
HTMLCLIENT_CONFIG: dict = {}
# Modules supplémentaires qui enregistrent clients/décorateurs au boot
HTMLCLIENT_CLIENT_MODULES: list[str] = []
# Contrôleurs frontend (dotted paths), surchargent les contrôleurs mémoire
HTMLCLIENT_FRONTEND_CONTROLLERS: dict[str, str] = {}
HTMLCLIENT_MEMORY_FIXTURES = os.getenv("HTMLCLIENT_MEMORY_FIXTURES", "")

# --------------------------------------------------------------------------------------
# Logging (propre, exploitable)
# --------------------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "[{levelname}] {name}: {message}", "style": "{"},
        "verbose": {"format": "{asctime} [{levelname}] {name} {module}:{lineno} — {message}", "style": "{"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose"},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django.request": {"handlers": ["console"], "level": "WARNING", "propagate": True},
    },
}

LOGGING["loggers"].update({
    "htmlclient": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    "htmlclient.cache": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    "htmlclient.clients.decorators": {"handlers": ["console"], "level": "INFO", "propagate": False},
})
