# vitrine/settings/dev.py
# export DJANGO_SETTINGS_MODULE=vitrine.settings.dev

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ["127.0.0.1", "localhost", "testserver"]
CSRF_TRUSTED_ORIGINS = ["http://127.0.0.1:8000", "http://localhost:8000"]

# Dev: pas de redirection SSL forcée
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# Emails en console si tu préfères debug facile
if env_flag("DEV_EMAIL_CONSOLE", default=True):
    EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# Jeu de données du MemoryStore
HTMLCLIENT_MEMORY_FIXTURES = HTMLCLIENT_MEMORY_FIXTURES or str(BASE_DIR / "configs" / "htmlclient" / "fixtures" / "demo.yml")

LOGGING["loggers"].update({
    "htmlclient.cache": {"handlers": ["console"], "level": "DEBUG", "propagate": False},
})
