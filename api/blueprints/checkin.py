from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from ..auth import staff_required
from ..export import render_reservation_card
from ..extensions import db
from ..http import jerror
from ..schemas import ConfirmCheckInRequest, LookupRequest
from ..services import checkin
from ..store import DataStore
from ..utils.time import api_date, api_iso_z, api_time

bp = Blueprint("checkin", __name__)


def _store() -> DataStore:
    return DataStore(db.session)


def _table_name(store, reservation) -> str | None:
    if not reservation.table_id:
        return None
    table = store.find_one("billiard_table", table_id=reservation.table_id)
    return table.table_name if table else None


def _serialize(reservation, table_name: str | None = None) -> dict:
    return {
        "id": reservation.id,
        "reservationNo": reservation.reservation_no,
        "tableId": reservation.table_id,
        "tableName": table_name,
        "date": api_date(reservation.reservation_date),
        "startTime": api_time(reservation.start_time),
        "duration": reservation.duration,
        "paymentMethod": reservation.payment_method,
        "paymentType": reservation.payment_type,
        "paymentStatus": reservation.payment_status,
        "referenceNo": reservation.reference_no,
        "proofOfPayment": reservation.proof_of_payment,
        "status": reservation.status,
        "createdAt": api_iso_z(reservation.created_at),
    }


def _all_reservations(store) -> list:
    return store.find_many("reservation", order_by="id")


@bp.get("/reservations")
@staff_required
def list_reservations():
    store = _store()
    reservations = _all_reservations(store)
    q = request.args.get("q")
    if q is not None:
        reservations = checkin.search_suggestions(reservations, q)
    return jsonify(reservations=[_serialize(r) for r in reservations])


@bp.post("/lookup")
@staff_required
def lookup():
    payload = request.get_json(silent=True)
    if not payload:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = LookupRequest.model_validate(payload)
    except ValidationError as e:
        return jerror(422, "VALIDATION_ERROR", "Invalid input.", details=e.errors(include_url=False))

    query = checkin.parse_qr_payload(data.qr) if data.qr else data.query
    if not query:
        return jerror(400, "MISSING_QUERY", "Please enter a reservation number")

    store = _store()
    reservation = checkin.find_reservation(store, query)
    gate = checkin.gate_status(reservation)

    body = {
        "reservationNo": reservation.reservation_no,
        "status": reservation.status,
        "autoOpen": gate.auto_open,
        "title": gate.title,
        "message": gate.message,
        "reservation": None,
    }
    # statuses outside the gate stay closed until the operator opts into viewing
    if gate.auto_open or data.viewOnly:
        body["reservation"] = _serialize(reservation, _table_name(store, reservation))
    return jsonify(body), 200


@bp.get("/reservations/<reservation_no>/confirmation")
@staff_required
def confirmation(reservation_no):
    reservation = checkin.find_reservation(_store(), reservation_no)
    return jsonify(reservationNo=reservation.reservation_no, **checkin.prepare_check_in(reservation))


@bp.post("/reservations/<reservation_no>/confirm")
@staff_required
def confirm(reservation_no):
    try:
        data = ConfirmCheckInRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return jerror(422, "VALIDATION_ERROR", "Invalid input.", details=e.errors(include_url=False))

    store = _store()
    reservation = checkin.find_reservation(store, reservation_no)
    result = checkin.confirm_check_in(store, reservation, data.gcashRef, data.referenceNo)

    return jsonify(
        title="Check-in Successful!",
        message=result.message,
        rule=result.rule,
        referenceNo=result.reference_no,
        reservations=[_serialize(r) for r in _all_reservations(store)],
    ), 200


@bp.get("/reservations/<reservation_no>/card.pdf")
@staff_required
def card_pdf(reservation_no):
    store = _store()
    reservation = checkin.find_reservation(store, reservation_no)
    pdf = render_reservation_card(reservation, _table_name(store, reservation))
    filename = checkin.export_filename(reservation, "pdf")
    return Response(
        pdf,
        mimetype="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
