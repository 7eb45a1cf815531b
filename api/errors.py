class AppError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred."

    def __init__(self, message: str | None = None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# --- store level ---

class StoreError(AppError):
    code = "STORE_ERROR"


class NotFound(StoreError):
    status = 404
    code = "NOT_FOUND"
    default_message = "Record not found."


class ConstraintViolation(StoreError):
    status = 409
    code = "CONSTRAINT_VIOLATION"
    default_message = "The change conflicts with existing data."


class Unavailable(StoreError):
    status = 503
    code = "UNAVAILABLE"
    default_message = "The data store is unavailable. Please try again."


class UnknownCollection(KeyError):
    pass


# --- identity ---

class AuthError(AppError):
    status = 401
    code = "AUTH_FAILED"


class MissingCredentials(AuthError):
    status = 400
    code = "MISSING_CREDENTIALS"
    default_message = "Please enter both email and password."


class InvalidCredentials(AuthError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password."


class AccountDeactivated(AuthError):
    status = 403
    code = "ACCOUNT_DEACTIVATED"
    default_message = "Your account has been deactivated."

    @property
    def reason(self) -> str:
        return self.message


class ProvisioningFailed(AuthError):
    status = 500
    code = "PROVISIONING_FAILED"
    default_message = "Failed to create customer profile."

    def __init__(self, message=None, details=None, inconsistent: bool = False):
        super().__init__(message, details)
        self.inconsistent = inconsistent


class ProfileNotFound(AuthError):
    status = 500
    code = "PROFILE_NOT_FOUND"
    default_message = "Customer profile not found. Please try logging in again."


class ProviderError(AppError):
    status = 502
    code = "PROVIDER_ERROR"
    default_message = "Unable to reach the sign-in provider."


# --- check-in ---

class ReservationNotFound(NotFound):
    default_message = "Reservation number not found in the system."

    def __init__(self, query: str):
        super().__init__(details={"query": query})
        self.query = query


class MissingReference(AppError):
    status = 400
    code = "MISSING_REFERENCE"
    default_message = "Please enter GCash Reference Number"


class CheckInFailed(AppError):
    code = "CHECKIN_FAILED"
    default_message = "Check-in failed. Please try again."
