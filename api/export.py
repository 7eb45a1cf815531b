from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from .utils.time import api_date, api_time


def _rows(reservation, table_name: str | None):
    paid = "Paid" if reservation.payment_status else "Unpaid"
    duration = f"{reservation.duration} hour(s)" if reservation.duration else "-"
    return [
        ("Reservation No", reservation.reservation_no),
        ("Table", table_name or (f"#{reservation.table_id}" if reservation.table_id else "-")),
        ("Date", api_date(reservation.reservation_date) or "-"),
        ("Start Time", api_time(reservation.start_time) or "-"),
        ("Duration", duration),
        ("Payment Method", reservation.payment_method or "-"),
        ("Payment Type", reservation.payment_type or "-"),
        ("Payment Status", paid),
        ("Reference No", reservation.reference_no or "-"),
        ("Status", reservation.status),
    ]


def render_reservation_card(reservation, table_name: str | None = None) -> bytes:
    buffer = BytesIO()
    p = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4

    p.setTitle(f"Reservation {reservation.reservation_no}")
    p.setFont("Helvetica-Bold", 18)
    p.drawString(50, height - 60, "Billiard Hall Reservation")

    y = height - 100
    for label, value in _rows(reservation, table_name):
        p.setFont("Helvetica-Bold", 12)
        p.drawString(50, y, f"{label}:")
        p.setFont("Helvetica", 12)
        p.drawString(200, y, str(value))
        y -= 22

    p.setFont("Helvetica-Oblique", 10)
    p.drawString(50, y - 20, "Please present this card at the front desk.")
    p.showPage()
    p.save()
    buffer.seek(0)
    return buffer.read()
