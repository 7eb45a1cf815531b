import json
import logging
import random
from dataclasses import dataclass
from datetime import datetime

from ..errors import CheckInFailed, MissingReference, ReservationNotFound, StoreError
from ..utils.time import compact_timestamp

log = logging.getLogger(__name__)

AUTO_OPEN_STATUSES = ("pending", "approved")
STATUS_ONGOING = "ongoing"

CASH = "Cash"
GCASH = "GCash"
FULL_PAYMENT = "Full Payment"

RULE_CASH_FULL = "cash_full_payment"
RULE_GCASH = "gcash"
RULE_STATUS_ONLY = "status_only"


@dataclass(frozen=True)
class StatusGate:
    auto_open: bool
    title: str | None = None
    message: str | None = None


@dataclass
class CheckInResult:
    rule: str
    reference_no: str | None
    message: str


def parse_qr_payload(text: str) -> str:
    """QR codes carry either ``{"reservationNo": ...}`` or the bare number."""
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return text
    if isinstance(parsed, dict) and parsed.get("reservationNo"):
        return str(parsed["reservationNo"])
    return text


def find_reservation(store, query: str):
    term = str(query).strip()
    found = store.find_one("reservation", reservation_no=term) if term else None
    if found is None:
        raise ReservationNotFound(query)
    return found


def search_suggestions(reservations, query: str) -> list:
    term = (query or "").strip().lower()
    if not term:
        return []
    return [r for r in reservations if r.reservation_no and term in r.reservation_no.lower()]


def gate_status(reservation) -> StatusGate:
    if reservation.status in AUTO_OPEN_STATUSES:
        return StatusGate(True)
    if reservation.status == STATUS_ONGOING:
        return StatusGate(False, "Reservation Ongoing", "This reservation is currently ongoing.")
    return StatusGate(False, "Invalid Status", f"Reservation status: {reservation.status}")


def compute_reference_number(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"{compact_timestamp(now)}{random.randint(0, 9999):04d}"


def _is_cash_full(reservation) -> bool:
    return reservation.payment_method == CASH and reservation.payment_type == FULL_PAYMENT


def prepare_check_in(reservation) -> dict:
    """What the confirmation step needs before the operator commits."""
    return {
        "requiresGcashRef": reservation.payment_method == GCASH,
        "referenceNo": compute_reference_number() if _is_cash_full(reservation) else None,
    }


def confirm_check_in(store, reservation, gcash_ref: str | None = None,
                     reference_no: str | None = None) -> CheckInResult:
    if _is_cash_full(reservation):
        reference_no = reference_no or compute_reference_number()
        result = CheckInResult(
            RULE_CASH_FULL, reference_no,
            "Customer checked in and payment marked as complete.",
        )
        fields = {"status": "pending", "payment_status": True, "reference_no": reference_no}
    elif reservation.payment_method == GCASH:
        if not gcash_ref or not gcash_ref.strip():
            raise MissingReference()
        gcash_ref = gcash_ref.strip()
        result = CheckInResult(RULE_GCASH, gcash_ref, "Customer checked in.")
        fields = {"status": "pending", "reference_no": gcash_ref}
    else:
        result = CheckInResult(RULE_STATUS_ONLY, None, "Customer checked in.")
        fields = {"status": "pending"}

    try:
        store.update("reservation", fields, id=reservation.id)
    except StoreError as e:
        log.error("Check-in of reservation %s failed: %s", reservation.reservation_no, e)
        raise CheckInFailed() from e

    log.info("Checked in reservation %s (%s)", reservation.reservation_no, result.rule)
    return result


def export_filename(reservation, extension: str) -> str:
    return f"reservation_{reservation.reservation_no}.{extension.lstrip('.')}"
