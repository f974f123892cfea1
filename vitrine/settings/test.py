# vitrine/settings/test.py
from .dev import *  # noqa: F401,F403

# Cache local en mémoire
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "htmlclient-tests",
        "TIMEOUT": 300,
    }
}

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

SESSION_ENGINE = "django.contrib.sessions.backends.cache"
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Les tests remplissent le MemoryStore eux-mêmes
HTMLCLIENT_MEMORY_FIXTURES = ""

LOGGING["loggers"].update({
    "htmlclient": {"handlers": ["console"], "level": "CRITICAL", "propagate": False},
    "htmlclient.cache": {"handlers": ["console"], "level": "CRITICAL", "propagate": False},
    "htmlclient.clients.decorators": {"handlers": ["console"], "level": "CRITICAL", "propagate": False},
})
