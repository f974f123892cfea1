# vitrine/settings/prod.py
from .base import *  # noqa: F401,F403
from .base import _int_env

DEBUG = False

SECURE_HSTS_SECONDS = _int_env("SECURE_HSTS_SECONDS", 31536000)
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_REFERRER_POLICY = "same-origin"

# Reverse proxy (si derrière un LB terminant TLS)
if env_flag("USE_X_FORWARDED_PROTO", default=True):
    SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

# IGNORE_EXCEPTIONS désactivé: une panne Redis doit se voir en prod
CACHES["default"]["OPTIONS"]["IGNORE_EXCEPTIONS"] = False

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOGGING["root"]["level"] = LOG_LEVEL
