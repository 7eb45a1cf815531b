from pydantic import BaseModel, EmailStr, Field, field_validator


class LoginRequest(BaseModel):
    # plain str: the built-in administrator signs in with a non-email literal
    email: str = Field("", max_length=255)
    password: str = Field("", max_length=255)


class OAuthCallbackRequest(BaseModel):
    accessToken: str = Field(..., min_length=1)


class LogoutRequest(BaseModel):
    accessToken: str | None = None


class LookupRequest(BaseModel):
    query: str | None = Field(None, max_length=255)
    qr: str | None = Field(None, max_length=2048)
    viewOnly: bool = False

    @field_validator("query", "qr")
    @classmethod
    def blank_to_none(cls, v: str | None):
        if v is not None and not v.strip():
            return None
        return v


class ConfirmCheckInRequest(BaseModel):
    gcashRef: str | None = Field(None, max_length=64)
    referenceNo: str | None = Field(None, pattern=r"^\d{18}$")


class ProviderUser(BaseModel):
    """A user verified by the external identity provider."""

    email: EmailStr
    display_name: str | None = None
    name: str | None = None
    avatar_url: str | None = None
    phone: str | None = None
    handle: str | None = None

    @property
    def local_part(self) -> str:
        return str(self.email).split("@")[0]

    @classmethod
    def from_supabase(cls, payload: dict) -> "ProviderUser":
        meta = payload.get("user_metadata") or {}
        return cls(
            email=payload["email"],
            display_name=meta.get("full_name"),
            name=meta.get("name"),
            avatar_url=meta.get("avatar_url"),
            phone=meta.get("phone") or payload.get("phone") or None,
            handle=meta.get("preferred_username"),
        )
