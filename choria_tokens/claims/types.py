"""Purpose-typed claim sets carried in Choria tokens."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from choria_tokens.crypto.keys import decode_public_key
from choria_tokens.crypto.types import PublicKey


class Purpose(StrEnum):
    """The role a token authorizes."""

    UNKNOWN = ""
    PROVISIONING = "choria_provisioning"
    CLIENT = "choria_client_id"
    SERVER = "choria_server"


class StandardClaims(BaseModel):
    """Envelope shared by every token purpose."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    purpose: Purpose = Purpose.UNKNOWN
    issuer: str = Field(default="", alias="iss")
    subject: str | None = Field(default=None, alias="sub")
    issued_at: datetime | None = Field(default=None, alias="iat")
    not_before: datetime | None = Field(default=None, alias="nbf")
    expires_at: datetime | None = Field(default=None, alias="exp")
    token_id: str | None = Field(default=None, alias="jti")
    trust_chain_signature: str | None = Field(default=None, alias="tcs")

    @field_validator("purpose", mode="before")
    @classmethod
    def _coerce_purpose(cls, value: Any) -> Purpose:
        try:
            return Purpose(value)
        except ValueError:
            return Purpose.UNKNOWN

    @field_serializer("issued_at", "not_before", "expires_at", when_used="json")
    def _numeric_date(self, value: datetime | None) -> int | None:
        if value is None:
            return None
        return int(value.timestamp())

    def is_expired(self) -> bool:
        """Report whether the expiry time has passed; never for no expiry."""
        if self.expires_at is None:
            return False
        return self.expires_at <= datetime.now(UTC)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JWT payload using wire claim names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProvisioningClaims(StandardClaims):
    """Bootstrap credentials handed to unprovisioned servers."""

    purpose: Purpose = Purpose.PROVISIONING
    secure: bool = Field(default=False, alias="chs")
    urls: str | None = Field(default=None, alias="chu")
    token: str = Field(default="", alias="cht")
    srv_domain: str | None = Field(default=None, alias="chsrv")
    provision_by_default: bool = Field(default=False, alias="chpd")
    registration_data: str | None = Field(default=None, alias="chrd")
    facts_data: str | None = Field(default=None, alias="chf")
    broker_user: str | None = Field(default=None, alias="pnu")
    broker_password: str | None = Field(default=None, alias="pnp")
    organization: str | None = Field(default=None, alias="ou")
    protocol_v2: bool | None = Field(default=None, alias="v2")
    allow_update: bool | None = Field(default=None, alias="upd")
    extensions: dict[str, Any] | None = None

    @property
    def url_list(self) -> list[str]:
        """Provisioning broker URLs as a list."""
        if not self.urls:
            return []
        return [u.strip() for u in self.urls.split(",") if u.strip()]


class ClientPermissions(BaseModel):
    """Special capabilities granted to a client."""

    streams_admin: bool = False
    streams_user: bool = False
    events_viewer: bool = False
    election_user: bool = False
    system_user: bool = False
    fleet_management: bool = False
    signed_fleet_management: bool = False
    extended_service_lifetime: bool = False
    authentication_delegator: bool = False
    org_admin: bool = False


class ServerPermissions(BaseModel):
    """Special capabilities granted to a fleet server."""

    submission: bool = False
    streams: bool = False
    service_host: bool = False


class _PublicKeyClaims(StandardClaims):
    public_key: str = ""

    def public_key_object(self) -> PublicKey:
        """Decode the embedded public key."""
        return decode_public_key(self.public_key)


class ClientIDClaims(_PublicKeyClaims):
    """Identity of an end-user client."""

    purpose: Purpose = Purpose.CLIENT
    caller_id: str = Field(default="", alias="callerid")
    allowed_agents: list[str] | None = Field(default=None, alias="agents")
    opa_policy: str | None = None
    permissions: ClientPermissions | None = None
    user_properties: dict[str, str] | None = None
    additional_publish_subjects: list[str] | None = Field(
        default=None, alias="pub_subjects"
    )
    organization: str | None = Field(default=None, alias="ou")


class ServerClaims(_PublicKeyClaims):
    """Identity of a fleet server and its collective membership."""

    purpose: Purpose = Purpose.SERVER
    identity: str = ""
    collectives: list[str] = Field(default_factory=list)
    permissions: ServerPermissions | None = None
    additional_publish_subjects: list[str] | None = Field(
        default=None, alias="pub_subjects"
    )
    organization: str | None = Field(default=None, alias="ou")


AnyClaims = ProvisioningClaims | ClientIDClaims | ServerClaims

CLAIMS_BY_PURPOSE: dict[Purpose, type[AnyClaims]] = {
    Purpose.PROVISIONING: ProvisioningClaims,
    Purpose.CLIENT: ClientIDClaims,
    Purpose.SERVER: ServerClaims,
}
