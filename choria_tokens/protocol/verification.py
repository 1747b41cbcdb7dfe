"""Verification of signed tokens and decoding of their claims."""

from pathlib import Path
from typing import Any, TypeVar, assert_never, overload

import jwt
from jwt.types import Options

from choria_tokens.claims.decoding import decode_claims, decode_claims_as
from choria_tokens.claims.types import (
    AnyClaims,
    ClientIDClaims,
    ProvisioningClaims,
    ServerClaims,
    StandardClaims,
)
from choria_tokens.core.errors import (
    InvalidToken,
    KeyTypeMismatch,
    MissingKey,
    SignatureInvalid,
    TokenExpired,
    UnsupportedKeyType,
)
from choria_tokens.crypto.keys import key_pair_from_key, load_key_pair
from choria_tokens.crypto.types import KeyFamily, KeyPair, PublicKey

T = TypeVar("T", bound=StandardClaims)

_ALGORITHM_FAMILIES = {
    "EdDSA": KeyFamily.ED25519,
    "RS256": KeyFamily.RSA,
    "RS384": KeyFamily.RSA,
    "RS512": KeyFamily.RSA,
}


def _algorithm_family(algorithm: str) -> KeyFamily:
    family = _ALGORITHM_FAMILIES.get(algorithm)
    if family is None:
        raise UnsupportedKeyType(f"unsupported signing method {algorithm}")
    return family


def _verification_key(algorithm: str, key: KeyPair | PublicKey) -> PublicKey:
    """Return the public key if its family matches the token algorithm."""
    pair = key if isinstance(key, KeyPair) else key_pair_from_key(key)
    expected = _algorithm_family(algorithm)
    if pair.family != expected:
        match expected:
            case KeyFamily.ED25519:
                raise KeyTypeMismatch("ed25519 public key required")
            case KeyFamily.RSA:
                raise KeyTypeMismatch("rsa public key required")
            case _:
                assert_never(expected)
    return pair.public_key


def _verified_payload(token: str, key: KeyPair | PublicKey | None) -> dict[str, Any]:
    if key is None:
        raise MissingKey("invalid public key")

    try:
        algorithm = jwt.get_unverified_header(token).get("alg", "")
    except jwt.PyJWTError as err:
        raise InvalidToken(f"malformed token: {err}") from err

    public_key = _verification_key(algorithm, key)
    opts: Options = {"verify_aud": False}
    try:
        return jwt.decode(token, public_key, algorithms=[algorithm], options=opts)
    except jwt.InvalidSignatureError as err:
        raise SignatureInvalid(str(err), algorithm) from err
    except jwt.ExpiredSignatureError as err:
        raise TokenExpired(str(err)) from err
    except jwt.PyJWTError as err:
        raise InvalidToken(str(err)) from err


@overload
def parse_token(
    token: str, public_key: KeyPair | PublicKey | None
) -> dict[str, Any]: ...


@overload
def parse_token(
    token: str, public_key: KeyPair | PublicKey | None, claims_type: type[T]
) -> T: ...


def parse_token(
    token: str,
    public_key: KeyPair | PublicKey | None,
    claims_type: type[T] | None = None,
) -> dict[str, Any] | T:
    """Verify token against public_key and decode its claims.

    The supplied key family must match the algorithm in the token header
    before any signature check is attempted. Expiry is checked only after the
    signature verifies. Claims are returned as a dict unless claims_type is
    given.
    """
    payload = _verified_payload(token, public_key)
    if claims_type is None:
        return payload
    return decode_claims_as(payload, claims_type)


def parse_any_token(token: str, public_key: KeyPair | PublicKey | None) -> AnyClaims:
    """Verify token and decode it into the variant matching its purpose."""
    return decode_claims(_verified_payload(token, public_key))


def parse_provisioning_token(
    token: str, public_key: KeyPair | PublicKey | None
) -> ProvisioningClaims:
    """Verify and decode a provisioning token."""
    return parse_token(token, public_key, ProvisioningClaims)


def parse_client_id_token(
    token: str, public_key: KeyPair | PublicKey | None
) -> ClientIDClaims:
    """Verify and decode a client identity token."""
    return parse_token(token, public_key, ClientIDClaims)


def parse_server_token(
    token: str, public_key: KeyPair | PublicKey | None
) -> ServerClaims:
    """Verify and decode a server token."""
    return parse_token(token, public_key, ServerClaims)


def parse_token_with_key_file(
    token: str, key_file: str | Path, claims_type: type[T]
) -> T:
    """Verify token with a key loaded from a seed file or RSA PEM file."""
    return parse_token(token, load_key_pair(key_file), claims_type)
