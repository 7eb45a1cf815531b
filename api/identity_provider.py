import logging
from urllib.parse import urlencode

import requests

from .errors import ProviderError
from .schemas import ProviderUser

log = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"


class SupabaseIdentityProvider:
    """
    Thin client for the hosted auth service's REST endpoints.

    The provider owns the OAuth round trip; this side only needs the
    authorize URL, the verified user behind an access token, and sign-out.
    """

    def __init__(self, base_url: str, api_key: str, provider: str = "google", timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.provider = provider
        self.timeout = timeout
        self._listeners = []

    def _headers(self, access_token: str | None = None) -> dict:
        headers = {"apikey": self.api_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def on_session_change(self, callback) -> None:
        self._listeners.append(callback)

    def _emit(self, event: str, user: ProviderUser | None) -> None:
        for callback in list(self._listeners):
            try:
                callback(event, user)
            except Exception:
                log.exception("Session listener failed for %s", event)

    def begin_external_sign_in(self, return_target: str) -> str:
        if not self.base_url:
            raise ProviderError("Sign-in provider is not configured.")
        query = urlencode({
            "provider": self.provider,
            "redirect_to": return_target,
            "access_type": "offline",
            "prompt": "select_account",
        })
        return f"{self.base_url}/auth/v1/authorize?{query}"

    def get_current_session(self, access_token: str) -> ProviderUser | None:
        try:
            r = requests.get(
                f"{self.base_url}/auth/v1/user",
                headers=self._headers(access_token),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProviderError(details=str(e)) from e

        if r.status_code in (401, 403):
            return None
        if r.status_code != 200:
            raise ProviderError(details=f"HTTP {r.status_code}")

        payload = r.json()
        if not payload.get("email"):
            return None
        user = ProviderUser.from_supabase(payload)
        self._emit(SIGNED_IN, user)
        return user

    def sign_out(self, access_token: str | None = None) -> None:
        if access_token:
            try:
                requests.post(
                    f"{self.base_url}/auth/v1/logout",
                    headers=self._headers(access_token),
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                log.warning("Provider sign-out failed: %s", e)
        self._emit(SIGNED_OUT, None)
