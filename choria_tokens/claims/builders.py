"""Construction of validated claims for each token purpose."""

import re
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta

import uuid_utils

from choria_tokens.claims.types import (
    ClientIDClaims,
    ClientPermissions,
    ProvisioningClaims,
    Purpose,
    ServerClaims,
    ServerPermissions,
    StandardClaims,
)
from choria_tokens.core.errors import InvalidClaims, UnsupportedKeyType
from choria_tokens.core.settings import TokenSettings
from choria_tokens.crypto.keys import encode_public_key
from choria_tokens.crypto.types import PublicKey

_ORGANIZATION_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _validity(validity: timedelta | None, settings: TokenSettings) -> timedelta:
    if validity is None:
        return timedelta(seconds=settings.default_validity)
    if validity <= timedelta(0):
        raise InvalidClaims("validity must be positive")
    return validity


def _check_organization(org: str) -> str:
    if not org:
        raise InvalidClaims("organization is required")
    if not _ORGANIZATION_RE.match(org):
        raise InvalidClaims(f"invalid organization {org!r}")
    return org


def _encoded_public_key(public_key: PublicKey | None) -> str:
    if public_key is None:
        raise InvalidClaims("public key is required")
    try:
        return encode_public_key(public_key)
    except UnsupportedKeyType as err:
        raise InvalidClaims(f"invalid public key: {err}") from err


def new_standard_claims(
    issuer: str,
    purpose: Purpose,
    validity: timedelta | None = None,
    set_subject: bool = False,
) -> StandardClaims:
    """Create the envelope claims issued now and expiring after validity."""
    settings = TokenSettings()
    if purpose == Purpose.UNKNOWN:
        raise InvalidClaims("purpose is required")

    now = datetime.now(UTC).replace(microsecond=0)
    return StandardClaims(
        purpose=purpose,
        issuer=issuer or settings.default_issuer,
        subject=str(purpose) if set_subject else None,
        issued_at=now,
        not_before=now,
        expires_at=now + _validity(validity, settings),
        token_id=str(uuid_utils.uuid7()),
    )


def new_provisioning_claims(
    secure: bool,
    by_default: bool,
    token: str,
    user: str,
    password: str,
    urls: Sequence[str] | None,
    srv_domain: str,
    registration_data_file: str,
    facts_data_file: str,
    org: str,
    issuer: str,
    validity: timedelta | None = None,
) -> ProvisioningClaims:
    """Create claims for a provisioning bootstrap token."""
    if not urls and not srv_domain:
        raise InvalidClaims("srv domain or urls required")

    std = new_standard_claims(issuer, Purpose.PROVISIONING, validity, True)
    return ProvisioningClaims(
        **std.model_dump(exclude={"purpose"}),
        secure=secure,
        provision_by_default=by_default,
        token=token,
        broker_user=user or None,
        broker_password=password or None,
        urls=",".join(urls) if urls else None,
        srv_domain=srv_domain or None,
        registration_data=registration_data_file or None,
        facts_data=facts_data_file or None,
        organization=_check_organization(org),
    )


def new_client_id_claims(
    caller_id: str,
    allowed_agents: Sequence[str] | None,
    org: str,
    properties: Mapping[str, str] | None,
    opa_policy: str,
    issuer: str,
    validity: timedelta | None,
    permissions: ClientPermissions | None,
    public_key: PublicKey | None,
) -> ClientIDClaims:
    """Create claims identifying an end-user client."""
    if not caller_id:
        raise InvalidClaims("caller id is required")
    encoded_key = _encoded_public_key(public_key)

    std = new_standard_claims(issuer, Purpose.CLIENT, validity)
    return ClientIDClaims(
        **std.model_dump(exclude={"purpose", "subject"}),
        subject=caller_id,
        caller_id=caller_id,
        allowed_agents=list(allowed_agents) if allowed_agents else None,
        organization=_check_organization(org),
        user_properties=dict(properties) if properties else None,
        opa_policy=opa_policy or None,
        permissions=permissions,
        public_key=encoded_key,
    )


def new_server_claims(
    identity: str,
    collectives: Sequence[str],
    org: str,
    permissions: ServerPermissions | None,
    additional_publish: Sequence[str] | None,
    public_key: PublicKey | None,
    issuer: str,
    validity: timedelta | None = None,
) -> ServerClaims:
    """Create claims identifying a fleet server."""
    if not identity:
        raise InvalidClaims("identity is required")
    if not collectives or not all(collectives):
        raise InvalidClaims("at least one collective is required")
    encoded_key = _encoded_public_key(public_key)

    std = new_standard_claims(issuer, Purpose.SERVER, validity)
    return ServerClaims(
        **std.model_dump(exclude={"purpose", "subject"}),
        subject=identity,
        identity=identity,
        collectives=list(collectives),
        organization=_check_organization(org),
        permissions=permissions,
        additional_publish_subjects=(
            list(additional_publish) if additional_publish else None
        ),
        public_key=encoded_key,
    )
