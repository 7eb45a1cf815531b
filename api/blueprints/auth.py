import logging

from flask import Blueprint, current_app, jsonify, request, session
from pydantic import ValidationError

from ..extensions import db
from ..http import jerror
from ..identity_provider import SIGNED_IN, SIGNED_OUT
from ..schemas import LoginRequest, LogoutRequest, OAuthCallbackRequest
from ..services.identity import ExternalSignInFlow, IdentityService
from ..session_cache import clear_session, load_session, save_session
from ..store import DataStore
from ..utils.time import parse_iso_date

bp = Blueprint("auth", __name__)
log = logging.getLogger(__name__)


def _provider():
    return current_app.extensions["identity_provider"]


def _service() -> IdentityService:
    cfg = current_app.config
    return IdentityService(
        DataStore(db.session),
        _provider(),
        admin_shortcut=cfg["ALLOW_ADMIN_SHORTCUT"],
        provider_name=cfg["OAUTH_PROVIDER"],
        placeholder_birthdate=parse_iso_date(cfg["PLACEHOLDER_BIRTHDATE"]),
    )


def _flow() -> ExternalSignInFlow:
    return ExternalSignInFlow(_service(), _provider(), session)


def _signed_in(result):
    save_session(result.session)
    return jsonify(session=result.session.to_dict(), warnings=result.warnings), 200


@bp.post("/login")
def login():
    payload = request.get_json(silent=True)
    if payload is None:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = LoginRequest.model_validate(payload)
    except ValidationError as e:
        return jerror(422, "VALIDATION_ERROR", "Invalid input.", details=e.errors(include_url=False))

    result = _service().authenticate_local(data.email, data.password)
    log.info("Local login for account %s", result.session.account_id)
    return _signed_in(result)


@bp.get("/oauth/start")
def oauth_start():
    redirect_to = request.args.get("redirect_to") or current_app.config["OAUTH_REDIRECT_URL"]
    url = _flow().begin(redirect_to)
    return jsonify(url=url), 200


@bp.post("/oauth/callback")
def oauth_callback():
    payload = request.get_json(silent=True)
    if not payload:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = OAuthCallbackRequest.model_validate(payload)
    except ValidationError as e:
        return jerror(422, "VALIDATION_ERROR", "Invalid input.", details=e.errors(include_url=False))

    user = _provider().get_current_session(data.accessToken)
    if user is None:
        return jerror(401, "PROVIDER_SESSION_MISSING", "No verified sign-in session was found.")

    result = _flow().handle_session_change(SIGNED_IN, user, data.accessToken)
    if result is None:
        return jerror(409, "NO_PENDING_SIGNIN", "There is no pending sign-in to complete.")
    return _signed_in(result)


@bp.get("/session")
def current_session():
    return jsonify(session=load_session()), 200


@bp.post("/logout")
def logout():
    try:
        data = LogoutRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return jerror(422, "VALIDATION_ERROR", "Invalid input.", details=e.errors(include_url=False))

    if data.accessToken:
        _provider().sign_out(data.accessToken)
    _flow().handle_session_change(SIGNED_OUT)
    clear_session()
    return jsonify(message="Logged out"), 200
