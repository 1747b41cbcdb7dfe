"""Signing of claims into compact JWS tokens."""

import os
from pathlib import Path
from typing import assert_never

import jwt

from choria_tokens.claims.types import StandardClaims
from choria_tokens.core.errors import InvalidClaims, SigningFailure
from choria_tokens.core.settings import TokenSettings
from choria_tokens.crypto.keys import key_pair_from_key, load_key_pair
from choria_tokens.crypto.types import KeyFamily, KeyPair, PrivateKey


def _signing_pair(key: KeyPair | PrivateKey) -> KeyPair:
    pair = key if isinstance(key, KeyPair) else key_pair_from_key(key)
    if pair.private_key is None:
        raise SigningFailure("private key required for signing")
    return pair


def _check_validity_window(claims: StandardClaims) -> None:
    if claims.expires_at is None or claims.issued_at is None:
        return
    if claims.expires_at <= claims.issued_at:
        raise InvalidClaims("expiry must be after issue time")


def sign_token(claims: StandardClaims, key: KeyPair | PrivateKey) -> str:
    """Sign claims with an Ed25519 or RSA private key.

    The algorithm is chosen from the key family: EdDSA for Ed25519 keys and
    RS256 for RSA keys.
    """
    pair = _signing_pair(key)
    _check_validity_window(claims)

    match pair.family:
        case KeyFamily.ED25519 | KeyFamily.RSA:
            algorithm = pair.algorithm
        case _:
            assert_never(pair.family)

    try:
        return jwt.encode(claims.to_payload(), pair.private_key, algorithm=algorithm)
    except (jwt.PyJWTError, ValueError, TypeError) as err:
        raise SigningFailure(f"could not sign token: {err}") from err


def sign_token_with_key_file(claims: StandardClaims, key_file: str | Path) -> str:
    """Sign claims with a key loaded from a seed file or RSA PEM file."""
    return sign_token(claims, load_key_pair(key_file))


def save_and_sign_token_with_key_file(
    claims: StandardClaims,
    key_file: str | Path,
    out_file: str | Path,
    mode: int | None = None,
) -> None:
    """Sign claims and write the token to out_file with the given mode.

    Where the platform lacks POSIX permission bits the mode is best effort.
    """
    if mode is None:
        mode = TokenSettings().token_file_mode
    token = sign_token_with_key_file(claims, key_file)

    fd = os.open(out_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(token)
    os.chmod(out_file, mode)
