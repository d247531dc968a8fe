# backend/settings/dev.py
"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT SETTINGS
Safe + convenient defaults. A throwaway webhook secret lets the sandbox gateway
(or curl) sign notifications locally.
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import PAYMENTS, env

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

CORS_ALLOWED_ORIGINS = env.list(
    "CORS_ALLOWED_ORIGINS", default=["http://localhost:3000"]
)

CSRF_TRUSTED_ORIGINS = env.list(
    "CSRF_TRUSTED_ORIGINS", default=["http://localhost:3000"]
)

CORS_ALLOW_CREDENTIALS = True

if not PAYMENTS["GATEWAY"]["WEBHOOK_SECRET"]:
    PAYMENTS["GATEWAY"]["WEBHOOK_SECRET"] = "dev-webhook-secret"
