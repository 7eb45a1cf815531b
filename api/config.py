
import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///local.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # staff bearer token for the check-in desk; see api.auth
    ADMIN_TOKEN = os.getenv("ADMIN_TOKEN")
    ALLOW_ADMIN_SHORTCUT = _flag("ALLOW_ADMIN_SHORTCUT", "true")

    SUPABASE_URL = os.getenv("SUPABASE_URL", "")
    SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
    OAUTH_PROVIDER = os.getenv("OAUTH_PROVIDER", "google")
    OAUTH_REDIRECT_URL = os.getenv("OAUTH_REDIRECT_URL", "http://localhost:5173")
    PROVIDER_TIMEOUT = int(os.getenv("PROVIDER_TIMEOUT", "10"))

    PLACEHOLDER_BIRTHDATE = os.getenv("PLACEHOLDER_BIRTHDATE", "2000-01-01")
