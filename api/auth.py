import os
from functools import wraps
from pathlib import Path

from dotenv import dotenv_values
from flask import current_app, request

from .http import jerror

ENV_FILE = Path(__file__).resolve().parents[1] / ".env"
DEV_STAFF_TOKEN = "dev-admin-token"


def staff_token() -> str:
    """App config first, then the process environment, then the project's .env file."""
    for source in (current_app.config.get("ADMIN_TOKEN"), os.getenv("ADMIN_TOKEN")):
        if source and source.strip():
            return source.strip()
    if ENV_FILE.exists():
        token = dotenv_values(ENV_FILE).get("ADMIN_TOKEN")
        if token and token.strip():
            return token.strip()
    return DEV_STAFF_TOKEN


def staff_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        scheme, _, token = request.headers.get("Authorization", "").strip().partition(" ")
        if scheme.lower() != "bearer" or token.strip() != staff_token():
            return jerror(401, "UNAUTHORIZED", "Missing or invalid bearer token.")
        return f(*args, **kwargs)

    return decorated
