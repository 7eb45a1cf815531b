import logging
import random
from datetime import date, time, timedelta

import click
from flask import Flask, current_app, jsonify
from flask.cli import with_appcontext
from flask_cors import CORS
from werkzeug.security import generate_password_hash

from .extensions import db, migrate
from .config import Config
from .errors import AppError
from .http import jerror_from
from .identity_provider import SupabaseIdentityProvider
from .blueprints.auth import bp as auth_bp
from .blueprints.checkin import bp as checkin_bp
from .models import (
    Account, BilliardTable, CustomerProfile, DeactivationRecord, Reservation,
    ROLE_ADMIN, ROLE_CUSTOMER, STATUS_ACTIVE, STATUS_DEACTIVATED,
)

log = logging.getLogger(__name__)


def _log_auth_event(event, user):
    log.info("Auth event: %s%s", event, f" ({user.email})" if user is not None else "")


def create_app(test_config=None, identity_provider=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    CORS(app, supports_credentials=True)

    db.init_app(app)
    migrate.init_app(app, db)

    if identity_provider is None:
        identity_provider = SupabaseIdentityProvider(
            app.config["SUPABASE_URL"],
            app.config["SUPABASE_ANON_KEY"],
            provider=app.config["OAUTH_PROVIDER"],
            timeout=app.config["PROVIDER_TIMEOUT"],
        )
    identity_provider.on_session_change(_log_auth_event)
    app.extensions["identity_provider"] = identity_provider

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(checkin_bp, url_prefix="/api/checkin")

    @app.errorhandler(AppError)
    def handle_app_error(e):
        if e.status >= 500:
            log.error("%s: %s", e.code, e.message)
        return jerror_from(e)

    @app.get("/health")
    def health():
        return jsonify(status="ok")

    app.cli.add_command(seed_command)
    app.cli.add_command(create_admin_command)

    return app


@click.command("seed")
@with_appcontext
def seed_command():
    """Creates sample data for the database."""
    db.session.query(Reservation).delete()
    db.session.query(BilliardTable).delete()
    db.session.query(DeactivationRecord).delete()
    db.session.query(CustomerProfile).delete()
    db.session.query(Account).delete()
    db.session.commit()
    print("Cleared existing data.")

    tables = [BilliardTable(table_name=f"Table {i+1}") for i in range(6)]
    db.session.add_all(tables)

    accounts = []
    for i in range(5):
        account = Account(
            email=f"customer{i+1}@example.com",
            role=ROLE_CUSTOMER,
            status=STATUS_ACTIVE,
            auth_provider="local",
            password=generate_password_hash("password123"),
        )
        account.profile = CustomerProfile(
            first_name=f"Customer{i+1}",
            last_name="Sample",
            email=account.email,
            contact_number=f"0917555000{i}",
            username=f"customer{i+1}",
            birthdate=date(2000, 1, 1),
        )
        accounts.append(account)

    suspended = accounts[-1]
    suspended.status = STATUS_DEACTIVATED
    db.session.add_all(accounts)
    db.session.flush()
    db.session.add(DeactivationRecord(account_id=suspended.account_id, duration_days=3, status=STATUS_DEACTIVATED))
    db.session.commit()
    print(f"Created {len(accounts)} customer accounts.")

    statuses = ["pending", "approved", "ongoing", "completed", "cancelled"]
    payments = [("Cash", "Full Payment"), ("Cash", "Downpayment"), ("GCash", "Full Payment"), ("GCash", "Downpayment")]
    today = date.today()
    reservations = []
    for i in range(12):
        method, payment_type = random.choice(payments)
        reservations.append(Reservation(
            reservation_no=f"RES-{today:%Y%m%d}-{i+1:03d}",
            table_id=random.choice(tables).table_id,
            reservation_date=today + timedelta(days=random.randint(0, 2)),
            start_time=time(random.randint(13, 22), random.choice([0, 30])),
            duration=random.randint(1, 3),
            payment_method=method,
            payment_type=payment_type,
            payment_status=False,
            status=random.choice(statuses),
        ))

    db.session.add_all(reservations)
    db.session.commit()
    print(f"Created {len(reservations)} reservations.")
    print("Database seeded!")


@click.command("create-admin")
@click.option("--email", required=True)
@click.password_option()
@with_appcontext
def create_admin_command(email, password):
    """Provisions an administrator account with a hashed password."""
    email = email.strip().lower()
    account = Account.query.filter_by(email=email).one_or_none()
    if account is None:
        account = Account(email=email, auth_provider="local")
        db.session.add(account)
    account.role = ROLE_ADMIN
    account.status = STATUS_ACTIVE
    account.password = generate_password_hash(password)
    db.session.commit()
    current_app.logger.info("Administrator %s ready", email)
    print(f"Administrator {email} ready (id {account.account_id}).")
