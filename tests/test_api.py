import re
import uuid

from werkzeug.security import generate_password_hash

from api.extensions import db
from api.schemas import ProviderUser
from api.session_cache import PENDING_MARKER, SESSION_KEY


def _unique_email(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}@example.com"


def _customer(store, email, password="secret"):
    account = store.insert("accounts", {
        "email": email, "role": "customer", "status": "active",
        "auth_provider": "local", "password": generate_password_hash(password),
    })
    store.insert("customer", {
        "account_id": account.account_id, "first_name": "Ana", "middle_name": "",
        "last_name": "Reyes", "contact_number": "",
    })
    return account


def _seed_reservations(store):
    table = store.insert("billiard_table", {"table_name": "VIP Table"})
    rows = [
        ("RES-001", "approved", "Cash", "Full Payment"),
        ("RES-002", "pending", "GCash", "Downpayment"),
        ("RES-003", "ongoing", "Cash", "Downpayment"),
        ("RES-004", "completed", "Cash", "Downpayment"),
    ]
    for number, status, method, payment_type in rows:
        store.insert("reservation", {
            "reservation_no": number, "status": status, "table_id": table.table_id,
            "payment_method": method, "payment_type": payment_type, "payment_status": False,
        })


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.get_json().get("status") == "ok"


# --- auth ---

def test_login_missing_fields_400(client):
    r = client.post("/api/auth/login", json={"email": "someone@example.com"})
    assert r.status_code == 400
    assert r.get_json().get("code") == "MISSING_CREDENTIALS"


def test_login_invalid_payload_400(client):
    r = client.post("/api/auth/login", data="not json", content_type="text/plain")
    assert r.status_code == 400
    assert r.get_json().get("code") == "INVALID_PAYLOAD"


def test_admin_login_sets_session_cache(client):
    r = client.post("/api/auth/login", json={"email": "Admin", "password": "admin"})
    assert r.status_code == 200
    body = r.json
    assert body["session"] == {
        "account_id": "0000", "email": "ADMIN", "role": "admin", "full_name": "Administrator",
    }
    with client.session_transaction() as sess:
        assert sess[SESSION_KEY]["role"] == "admin"

    r = client.get("/api/auth/session")
    assert r.get_json()["session"]["account_id"] == "0000"


def test_customer_login_200(client, store):
    email = _unique_email("login")
    _customer(store, email)
    r = client.post("/api/auth/login", json={"email": email.upper(), "password": "secret"})
    assert r.status_code == 200
    body = r.get_json()
    assert body["session"]["full_name"] == "Ana Reyes"
    assert body["warnings"] == []


def test_customer_login_wrong_password_401(client, store):
    email = _unique_email("wrong")
    _customer(store, email)
    r = client.post("/api/auth/login", json={"email": email, "password": "nope"})
    assert r.status_code == 401
    assert r.get_json()["code"] == "INVALID_CREDENTIALS"
    assert r.get_json()["message"] == "Invalid email or password."


def test_deactivated_login_403(client, store):
    email = _unique_email("deact")
    account = _customer(store, email)
    store.update("accounts", {"status": "deactivated"}, account_id=account.account_id)
    store.insert("deact_user", {"account_id": account.account_id, "duration_days": 2, "status": "deactivated"})
    r = client.post("/api/auth/login", json={"email": email, "password": "secret"})
    assert r.status_code == 403
    assert r.get_json()["message"] == "Your account has been deactivated for 2 days."
    with client.session_transaction() as sess:
        assert SESSION_KEY not in sess


def test_logout_clears_session(client, provider):
    client.post("/api/auth/login", json={"email": "admin", "password": "admin"})
    r = client.post("/api/auth/logout", json={"accessToken": "tok"})
    assert r.status_code == 200
    assert provider.signed_out == ["tok"]
    assert client.get("/api/auth/session").get_json()["session"] is None


def test_logout_rejects_malformed_body_422(client, provider):
    for body in (["x"], {"accessToken": 5}):
        r = client.post("/api/auth/logout", json=body)
        assert r.status_code == 422
        assert r.get_json()["code"] == "VALIDATION_ERROR"
    assert provider.signed_out == []


def test_logout_abandons_pending_oauth_sign_in(client, provider):
    provider.users["tok-late"] = ProviderUser(email=_unique_email("late"))
    client.get("/api/auth/oauth/start")
    with client.session_transaction() as sess:
        assert sess[PENDING_MARKER] == "true"

    client.post("/api/auth/logout", json={})
    with client.session_transaction() as sess:
        assert PENDING_MARKER not in sess

    r = client.post("/api/auth/oauth/callback", json={"accessToken": "tok-late"})
    assert r.status_code == 409


def test_oauth_round_trip(client, provider, store):
    email = _unique_email("oauth")
    provider.users["tok-ok"] = ProviderUser(email=email, display_name="Juan Dela Cruz")

    r = client.get("/api/auth/oauth/start?redirect_to=http://localhost:5173/")
    assert r.status_code == 200
    assert "authorize" in r.get_json()["url"]

    r = client.post("/api/auth/oauth/callback", json={"accessToken": "tok-ok"})
    assert r.status_code == 200
    body = r.get_json()
    assert body["session"]["full_name"] == "Juan Dela Cruz"
    assert body["session"]["role"] == "customer"

    # the marker was consumed, a replayed callback is refused
    r = client.post("/api/auth/oauth/callback", json={"accessToken": "tok-ok"})
    assert r.status_code == 409
    assert r.get_json()["code"] == "NO_PENDING_SIGNIN"
    assert len(store.find_many("accounts", email=email)) == 1


def test_oauth_callback_without_provider_session_401(client):
    client.get("/api/auth/oauth/start")
    r = client.post("/api/auth/oauth/callback", json={"accessToken": "unknown"})
    assert r.status_code == 401
    assert r.get_json()["code"] == "PROVIDER_SESSION_MISSING"


# --- check-in ---

def test_checkin_requires_bearer_token_401(client):
    r = client.get("/api/checkin/reservations")
    assert r.status_code == 401
    assert r.get_json().get("code") == "UNAUTHORIZED"


def test_checkin_bearer_token_parsing(client, staff_headers):
    token = staff_headers["Authorization"].split(" ", 1)[1]
    assert client.get("/api/checkin/reservations", headers={"Authorization": f"bearer {token}"}).status_code == 200
    for header in ("Bearer wrong-token", f"Token {token}", "Bearer"):
        r = client.get("/api/checkin/reservations", headers={"Authorization": header})
        assert r.status_code == 401


def test_list_and_suggest(client, store, staff_headers):
    _seed_reservations(store)
    r = client.get("/api/checkin/reservations", headers=staff_headers)
    assert r.status_code == 200
    assert [x["reservationNo"] for x in r.get_json()["reservations"]] == ["RES-001", "RES-002", "RES-003", "RES-004"]

    r = client.get("/api/checkin/reservations?q=res-00", headers=staff_headers)
    assert len(r.get_json()["reservations"]) == 4
    r = client.get("/api/checkin/reservations?q=003", headers=staff_headers)
    assert [x["reservationNo"] for x in r.get_json()["reservations"]] == ["RES-003"]


def test_lookup_not_found_returns_query(client, store, staff_headers):
    _seed_reservations(store)
    r = client.post("/api/checkin/lookup", json={"query": "res-001"}, headers=staff_headers)
    assert r.status_code == 404
    body = r.get_json()
    assert body["code"] == "NOT_FOUND"
    assert body["details"] == {"query": "res-001"}


def test_lookup_pending_opens_immediately(client, store, staff_headers):
    _seed_reservations(store)
    r = client.post("/api/checkin/lookup", json={"qr": '{"reservationNo": "RES-001"}'}, headers=staff_headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body["autoOpen"] is True
    assert body["reservation"]["reservationNo"] == "RES-001"
    assert body["reservation"]["tableName"] == "VIP Table"


def test_lookup_ongoing_needs_operator_opt_in(client, store, staff_headers):
    _seed_reservations(store)
    r = client.post("/api/checkin/lookup", json={"query": "RES-003"}, headers=staff_headers)
    body = r.get_json()
    assert body["autoOpen"] is False
    assert body["title"] == "Reservation Ongoing"
    assert body["reservation"] is None

    r = client.post("/api/checkin/lookup", json={"query": "RES-003", "viewOnly": True}, headers=staff_headers)
    assert r.get_json()["reservation"]["status"] == "ongoing"


def test_lookup_other_status_shows_literal(client, store, staff_headers):
    _seed_reservations(store)
    r = client.post("/api/checkin/lookup", json={"query": "RES-004"}, headers=staff_headers)
    body = r.get_json()
    assert body["autoOpen"] is False
    assert body["message"] == "Reservation status: completed"


def test_confirmation_preview(client, store, staff_headers):
    _seed_reservations(store)
    r = client.get("/api/checkin/reservations/RES-001/confirmation", headers=staff_headers)
    body = r.get_json()
    assert body["requiresGcashRef"] is False
    assert re.fullmatch(r"\d{18}", body["referenceNo"])


def test_confirm_cash_full_payment(client, store, staff_headers):
    _seed_reservations(store)
    r = client.post("/api/checkin/reservations/RES-001/confirm", json={}, headers=staff_headers)
    assert r.status_code == 200
    body = r.get_json()
    assert re.fullmatch(r"\d{18}", body["referenceNo"])
    refreshed = {x["reservationNo"]: x for x in body["reservations"]}
    assert refreshed["RES-001"]["paymentStatus"] is True
    assert refreshed["RES-001"]["status"] == "pending"
    assert refreshed["RES-001"]["referenceNo"] == body["referenceNo"]


def test_confirm_gcash_without_reference_400(client, store, staff_headers):
    _seed_reservations(store)
    r = client.post("/api/checkin/reservations/RES-002/confirm", json={"gcashRef": ""}, headers=staff_headers)
    assert r.status_code == 400
    assert r.get_json()["code"] == "MISSING_REFERENCE"
    db.session.expire_all()
    assert store.find_one("reservation", reservation_no="RES-002").reference_no is None


def test_confirm_gcash_with_reference(client, store, staff_headers):
    _seed_reservations(store)
    r = client.post("/api/checkin/reservations/RES-002/confirm", json={"gcashRef": "1234567890"}, headers=staff_headers)
    assert r.status_code == 200
    db.session.expire_all()
    saved = store.find_one("reservation", reservation_no="RES-002")
    assert saved.reference_no == "1234567890"
    assert saved.payment_status is False


def test_confirm_rejects_malformed_reference(client, store, staff_headers):
    _seed_reservations(store)
    r = client.post("/api/checkin/reservations/RES-001/confirm", json={"referenceNo": "abc"}, headers=staff_headers)
    assert r.status_code == 422
    assert r.get_json()["code"] == "VALIDATION_ERROR"


def test_card_pdf_download(client, store, staff_headers):
    _seed_reservations(store)
    r = client.get("/api/checkin/reservations/RES-001/card.pdf", headers=staff_headers)
    assert r.status_code == 200
    assert r.mimetype == "application/pdf"
    assert r.data.startswith(b"%PDF")
    assert 'filename="reservation_RES-001.pdf"' in r.headers["Content-Disposition"]
