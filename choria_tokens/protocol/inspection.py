"""Unverified inspection of token headers and payloads.

Nothing returned here is authenticated. These helpers exist so a consumer can
decide which public key to fetch or which code path to take before calling
the verification functions; they must never be used to grant access. The
signature segment is never decoded, so a damaged signature does not stop a
token from being inspected.
"""

import json
from typing import Any, TypeVar

from jwt.utils import base64url_decode
from pydantic import BaseModel, ConfigDict

from choria_tokens.claims.decoding import decode_claims_as
from choria_tokens.claims.types import Purpose, StandardClaims
from choria_tokens.core.errors import InvalidToken

T = TypeVar("T", bound=StandardClaims)

_HEADER = 0
_PAYLOAD = 1


class InspectedToken(BaseModel):
    """Structural view of a token whose signature has not been checked."""

    model_config = ConfigDict(frozen=True)

    algorithm: str
    purpose: Purpose
    payload: dict[str, Any]

    def claims_as(self, claims_type: type[T]) -> T:
        """Decode the unauthenticated payload into claims_type."""
        return decode_claims_as(self.payload, claims_type)


def _segment(token: str | bytes, index: int) -> dict[str, Any]:
    if isinstance(token, bytes):
        token = token.decode("utf-8", errors="replace")
    parts = token.strip().split(".")
    if len(parts) != 3:
        raise InvalidToken("token must have three segments")

    try:
        decoded = json.loads(base64url_decode(parts[index]))
    except ValueError as err:
        raise InvalidToken(f"malformed token segment: {err}") from err
    if not isinstance(decoded, dict):
        raise InvalidToken("token segment is not a JSON object")
    return decoded


def _purpose(value: Any) -> Purpose:
    try:
        return Purpose(value)
    except ValueError:
        return Purpose.UNKNOWN


def inspect_token(token: str | bytes) -> InspectedToken:
    """Decode the header and payload of token without verifying it."""
    header = _segment(token, _HEADER)
    payload = _segment(token, _PAYLOAD)
    algorithm = header.get("alg")
    return InspectedToken(
        algorithm=algorithm if isinstance(algorithm, str) else "",
        purpose=_purpose(payload.get("purpose")),
        payload=payload,
    )


def token_purpose(token: str | bytes) -> Purpose:
    """Unverified purpose of token, Purpose.UNKNOWN when it cannot be read."""
    try:
        return _purpose(_segment(token, _PAYLOAD).get("purpose"))
    except InvalidToken:
        return Purpose.UNKNOWN


def token_signing_algorithm(token: str | bytes) -> str:
    """Unverified header algorithm of token, empty when it cannot be read."""
    try:
        algorithm = _segment(token, _HEADER).get("alg")
    except InvalidToken:
        return ""
    return algorithm if isinstance(algorithm, str) else ""
