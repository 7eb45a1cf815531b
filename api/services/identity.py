import enum
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from werkzeug.security import check_password_hash

from ..errors import (
    AccountDeactivated, AppError, InvalidCredentials, MissingCredentials,
    ProfileNotFound, ProvisioningFailed, StoreError,
)
from ..identity_provider import SIGNED_IN, SIGNED_OUT
from ..models import ROLE_ADMIN, ROLE_CUSTOMER, STATUS_ACTIVE, STATUS_DEACTIVATED
from ..session_cache import PENDING_MARKER

log = logging.getLogger(__name__)

ADMIN_LITERAL = "ADMIN"
ADMIN_SESSION = {
    "account_id": "0000",
    "email": "ADMIN",
    "role": ROLE_ADMIN,
    "full_name": "Administrator",
}
DEFAULT_NAME = "User"


@dataclass
class UserSession:
    account_id: int | str
    email: str
    role: str
    full_name: str

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "email": self.email,
            "role": self.role,
            "full_name": self.full_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserSession":
        return cls(data["account_id"], data["email"], data["role"], data["full_name"])


@dataclass
class AuthResult:
    session: UserSession
    warnings: list[str] = field(default_factory=list)


def parse_display_name(text: str | None) -> tuple[str, str | None, str]:
    """
    Splits a display name into (first, middle, last).

    >>> parse_display_name("Jane Q. Public")
    ('Jane', 'Q.', 'Public')
    >>> parse_display_name("Jane")
    ('Jane', None, 'User')
    """
    parts = (text or "").split()
    first = parts[0] if parts else DEFAULT_NAME
    last = parts[-1] if len(parts) > 1 else DEFAULT_NAME
    middle = " ".join(parts[1:-1]) or None
    return first, middle, last


def compose_full_name(first: str | None, middle: str | None, last: str | None) -> str:
    return " ".join(p.strip() for p in (first, middle, last) if p and p.strip())


def deactivation_message(duration_days: int | None) -> str:
    if duration_days:
        plural = "s" if duration_days > 1 else ""
        return f"Your account has been deactivated for {duration_days} day{plural}."
    return "Your account has been deactivated."


def display_name_claim(user) -> str:
    return user.display_name or user.name or user.local_part


def _profile_fields(account_id: int, user, placeholder_birthdate: date) -> dict:
    first, middle, last = parse_display_name(display_name_claim(user))
    fields = {
        "account_id": account_id,
        "first_name": first,
        "last_name": last,
        "email": str(user.email).lower(),
        "contact_number": user.phone or "",
        "username": user.handle or user.local_part,
        "birthdate": placeholder_birthdate,
        "gender": None,
    }
    if middle:
        fields["middle_name"] = middle
    return fields


class SagaState(enum.Enum):
    PENDING = "pending"
    ACCOUNT_CREATED = "account_created"
    PROFILE_CREATED = "profile_created"
    COMPENSATED = "compensated"
    COMPENSATION_FAILED = "compensation_failed"


class ProvisioningSaga:
    """
    Creates an external account and its customer profile.

    The store gives no multi-statement transactions, so a failed profile insert
    is undone by deleting the account again. ``compensate`` is safe to call
    more than once.
    """

    def __init__(self, store, user, provider_name: str, placeholder_birthdate: date):
        self.store = store
        self.user = user
        self.provider_name = provider_name
        self.placeholder_birthdate = placeholder_birthdate
        self.state = SagaState.PENDING
        self.account_id = None

    def run(self):
        email = str(self.user.email).lower()
        try:
            account = self.store.insert("accounts", {
                "email": email,
                "role": ROLE_CUSTOMER,
                "status": STATUS_ACTIVE,
                "password": None,
                "auth_provider": self.provider_name,
                "profile_picture": self.user.avatar_url or None,
            })
        except StoreError as e:
            raise ProvisioningFailed(f"Failed to create account: {e.message}") from e
        self.account_id = account.account_id
        self.state = SagaState.ACCOUNT_CREATED
        log.info("Created %s account %s for %s", self.provider_name, self.account_id, email)

        try:
            self.store.insert(
                "customer", _profile_fields(self.account_id, self.user, self.placeholder_birthdate)
            )
        except StoreError as e:
            log.error("Customer insert failed for account %s: %s", self.account_id, e)
            self.compensate()
            raise ProvisioningFailed(f"Failed to create customer profile: {e.message}") from e

        self.state = SagaState.PROFILE_CREATED
        return account

    def compensate(self) -> None:
        if self.state in (SagaState.PENDING, SagaState.COMPENSATED):
            return
        try:
            self.store.delete("accounts", account_id=self.account_id)
        except StoreError as e:
            self.state = SagaState.COMPENSATION_FAILED
            log.error("Rollback of account %s failed, records are inconsistent: %s", self.account_id, e)
            raise ProvisioningFailed(
                f"Failed to create customer profile and account {self.account_id} could not be rolled back.",
                inconsistent=True,
            ) from e
        self.state = SagaState.COMPENSATED
        log.info("Rolled back account %s", self.account_id)


class IdentityService:
    def __init__(self, store, provider=None, *, admin_shortcut: bool = True,
                 provider_name: str = "google", placeholder_birthdate: date = date(2000, 1, 1)):
        self.store = store
        self.provider = provider
        self.admin_shortcut = admin_shortcut
        self.provider_name = provider_name
        self.placeholder_birthdate = placeholder_birthdate

    # --- best-effort side effects ---

    def _best_effort(self, warnings: list, label: str, fn, *args, **kwargs) -> None:
        try:
            fn(*args, **kwargs)
        except StoreError as e:
            log.warning("%s skipped: %s", label, e)
            warnings.append(f"{label} skipped: {e.message}")

    def _audit(self, warnings: list, account_id, action: str) -> None:
        self._best_effort(
            warnings, "System log", self.store.insert,
            "system_log", {"account_id": str(account_id), "action": action},
        )

    # --- shared steps ---

    def _check_active(self, account) -> None:
        if account.status != STATUS_DEACTIVATED:
            return
        record = self.store.find_one("deact_user", account_id=account.account_id, status=STATUS_DEACTIVATED)
        message = deactivation_message(record.duration_days if record else None)
        log.info("Login refused for deactivated account %s", account.account_id)
        raise AccountDeactivated(message)

    def _full_name(self, account_id) -> str | None:
        profile = self.store.find_one("customer", account_id=account_id)
        if profile is None:
            return None
        return compose_full_name(profile.first_name, profile.middle_name, profile.last_name)

    # --- local ---

    def authenticate_local(self, email: str, password: str) -> AuthResult:
        if not email or not email.strip() or not password:
            raise MissingCredentials()

        warnings = []
        if (self.admin_shortcut and email.strip().upper() == ADMIN_LITERAL
                and password.strip().upper() == ADMIN_LITERAL):
            session = UserSession.from_dict(ADMIN_SESSION)
            self._audit(warnings, session.account_id, "Admin login")
            return AuthResult(session, warnings)

        account = self.store.find_one("accounts", email=email.strip().lower())
        if account is None:
            raise InvalidCredentials()

        self._check_active(account)

        if not account.password or not check_password_hash(account.password, password):
            raise InvalidCredentials()

        full_name = email
        if account.role == ROLE_CUSTOMER:
            full_name = self._full_name(account.account_id) or email

        session = UserSession(account.account_id, account.email, account.role, full_name)
        self._audit(warnings, account.account_id, f"{account.role.capitalize()} login")
        return AuthResult(session, warnings)

    # --- external ---

    def authenticate_external(self, user, access_token: str | None = None) -> AuthResult:
        try:
            return self._reconcile_external(user)
        except AppError:
            # a retry must start from a clean provider session
            if self.provider is not None:
                self.provider.sign_out(access_token)
            raise

    def _reconcile_external(self, user) -> AuthResult:
        warnings = []
        email = str(user.email).lower()
        account = self.store.find_one("accounts", email=email)

        if account is None:
            saga = ProvisioningSaga(self.store, user, self.provider_name, self.placeholder_birthdate)
            account = saga.run()
            self._best_effort(warnings, "Profile mirror", self.store.insert, "profiles", {
                "id": account.account_id,
                "email": email,
                "full_name": display_name_claim(user),
                "phone": user.phone or "",
                "gender": None,
                "role": "user",
                "updated_at": datetime.now(timezone.utc),
            })
        else:
            self._check_active(account)
            if self.store.find_one("customer", account_id=account.account_id) is None:
                log.warning("Customer record missing for account %s, creating it", account.account_id)
                try:
                    self.store.insert(
                        "customer", _profile_fields(account.account_id, user, self.placeholder_birthdate)
                    )
                except StoreError as e:
                    raise ProvisioningFailed(f"Failed to create customer record: {e.message}") from e

            if user.avatar_url and account.profile_picture != user.avatar_url:
                self._best_effort(
                    warnings, "Avatar refresh", self.store.update,
                    "accounts", {"profile_picture": user.avatar_url}, account_id=account.account_id,
                )

        full_name = self._full_name(account.account_id)
        if full_name is None:
            log.error("No customer profile for account %s after reconciliation", account.account_id)
            raise ProfileNotFound()

        session = UserSession(account.account_id, account.email, account.role, full_name)
        self._audit(warnings, account.account_id, f"{self.provider_name.capitalize()} OAuth login")
        return AuthResult(session, warnings)


class ExternalSignInFlow:
    """
    Drives the redirect-based sign-in around a persisted pending marker.

    ``marker_store`` is any mutable mapping that survives the redirect (the
    Flask session in production). Consuming the marker is what makes a
    repeated resumption signal harmless.
    """

    def __init__(self, service: IdentityService, provider, marker_store):
        self.service = service
        self.provider = provider
        self.markers = marker_store

    def begin(self, return_target: str) -> str:
        self.markers[PENDING_MARKER] = "true"
        try:
            return self.provider.begin_external_sign_in(return_target)
        except AppError:
            self.markers.pop(PENDING_MARKER, None)
            raise

    def resume(self, user, access_token: str | None = None) -> AuthResult | None:
        if not self.markers.pop(PENDING_MARKER, None):
            return None
        return self.service.authenticate_external(user, access_token)

    def handle_session_change(self, event: str, user=None, access_token: str | None = None):
        if event == SIGNED_IN and user is not None:
            return self.resume(user, access_token)
        if event == SIGNED_OUT:
            self.markers.pop(PENDING_MARKER, None)
        return None
