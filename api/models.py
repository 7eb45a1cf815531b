
from sqlalchemy import func
from .extensions import db

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"

STATUS_ACTIVE = "active"
STATUS_DEACTIVATED = "deactivated"

PROVIDER_LOCAL = "local"


class Account(db.Model):
    __tablename__ = "accounts"
    account_id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    role = db.Column(db.String(20), nullable=False, default=ROLE_CUSTOMER)
    status = db.Column(db.String(20), nullable=False, default=STATUS_ACTIVE)
    auth_provider = db.Column(db.String(32), nullable=False, default=PROVIDER_LOCAL)
    # salted hash; NULL for accounts owned by an external identity provider
    password = db.Column(db.String(255))
    profile_picture = db.Column(db.String(512))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    profile = db.relationship("CustomerProfile", back_populates="account", uselist=False)


class CustomerProfile(db.Model):
    __tablename__ = "customer"
    customer_id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(
        db.Integer, db.ForeignKey("accounts.account_id", ondelete="CASCADE"),
        nullable=False, unique=True, index=True,
    )
    first_name = db.Column(db.String(120), nullable=False)
    middle_name = db.Column(db.String(120))
    last_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255))
    contact_number = db.Column(db.String(32), nullable=False, default="")
    username = db.Column(db.String(120))
    birthdate = db.Column(db.Date)
    gender = db.Column(db.String(20))

    account = db.relationship("Account", back_populates="profile")


class DeactivationRecord(db.Model):
    __tablename__ = "deact_user"
    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.account_id", ondelete="CASCADE"), nullable=False, index=True)
    duration_days = db.Column(db.Integer)
    deactivated_until = db.Column(db.DateTime(timezone=True))
    reason = db.Column(db.String(255))
    status = db.Column(db.String(20), nullable=False, default=STATUS_DEACTIVATED)


class ProfileMirror(db.Model):
    __tablename__ = "profiles"
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    email = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255))
    phone = db.Column(db.String(32))
    gender = db.Column(db.String(20))
    role = db.Column(db.String(20), nullable=False, default="user")
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class SystemLog(db.Model):
    __tablename__ = "system_log"
    log_id = db.Column(db.Integer, primary_key=True)
    # string so the built-in administrator ("0000") can be recorded too
    account_id = db.Column(db.String(32), nullable=False, index=True)
    action = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())


class BilliardTable(db.Model):
    __tablename__ = "billiard_table"
    table_id = db.Column(db.Integer, primary_key=True)
    table_name = db.Column(db.String(120), nullable=False)

    reservations = db.relationship("Reservation", back_populates="table")


class Reservation(db.Model):
    __tablename__ = "reservation"
    id = db.Column(db.Integer, primary_key=True)
    reservation_no = db.Column(db.String(64), nullable=False, index=True)
    table_id = db.Column(db.Integer, db.ForeignKey("billiard_table.table_id"), index=True)
    reservation_date = db.Column(db.Date)
    start_time = db.Column(db.Time)
    duration = db.Column(db.Integer)
    payment_method = db.Column(db.String(32))
    payment_type = db.Column(db.String(32))
    payment_status = db.Column(db.Boolean, nullable=False, default=False)
    reference_no = db.Column(db.String(64))
    proof_of_payment = db.Column(db.String(512))
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    table = db.relationship("BilliardTable", back_populates="reservations")
