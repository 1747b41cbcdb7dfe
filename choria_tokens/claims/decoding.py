"""Two-phase decoding of JWT payloads into purpose-specific claims."""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import ValidationError

from choria_tokens.claims.types import (
    CLAIMS_BY_PURPOSE,
    AnyClaims,
    Purpose,
    StandardClaims,
)
from choria_tokens.core.errors import InvalidClaims

T = TypeVar("T", bound=StandardClaims)


def decode_claims_as(payload: Mapping[str, Any], claims_type: type[T]) -> T:
    """Decode a payload into claims_type, rejecting a different purpose."""
    try:
        claims = claims_type.model_validate(payload)
    except ValidationError as err:
        raise InvalidClaims(f"invalid {claims_type.__name__} payload: {err}") from err

    expected = claims_type.model_fields["purpose"].default
    if expected != Purpose.UNKNOWN and claims.purpose != expected:
        raise InvalidClaims(f"not a {expected} token")
    return claims


def decode_claims(payload: Mapping[str, Any]) -> AnyClaims:
    """Decode the envelope to learn the purpose, then the matching variant."""
    envelope = decode_claims_as(payload, StandardClaims)
    claims_type = CLAIMS_BY_PURPOSE.get(envelope.purpose)
    if claims_type is None:
        raise InvalidClaims(f"unknown token purpose {envelope.purpose!r}")
    return decode_claims_as(payload, claims_type)
