"""Ed25519 seed handling, signing and verification."""

import string
from pathlib import Path

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from choria_tokens.core.errors import InvalidKeyMaterial, InvalidSeedLength

SEED_SIZE = 32
SIGNATURE_SIZE = 64
_HEX_DIGITS = frozenset(string.hexdigits)


def is_encoded_ed25519_key(data: bytes | str) -> bool:
    """Report whether data is the hex encoding of a 32 byte seed or key."""
    if isinstance(data, bytes):
        try:
            data = data.decode("ascii")
        except UnicodeDecodeError:
            return False
    return len(data) == SEED_SIZE * 2 and all(c in _HEX_DIGITS for c in data)


def decode_seed(encoded: bytes | str) -> bytes:
    """Decode hex seed text, failing before any length check on bad hex."""
    if isinstance(encoded, bytes):
        try:
            encoded = encoded.decode("ascii")
        except UnicodeDecodeError as err:
            raise InvalidKeyMaterial("seed is not hex encoded") from err
    encoded = encoded.strip()
    if not encoded:
        raise InvalidKeyMaterial("seed is empty")
    try:
        return bytes.fromhex(encoded)
    except ValueError as err:
        raise InvalidKeyMaterial(f"seed is not hex encoded: {err}") from err


def private_key_from_seed(seed: bytes) -> Ed25519PrivateKey:
    """Derive an Ed25519 private key from a raw 32 byte seed."""
    if len(seed) != SEED_SIZE:
        raise InvalidSeedLength("invalid seed length")
    return Ed25519PrivateKey.from_private_bytes(seed)


def private_key_from_seed_file(path: str | Path) -> Ed25519PrivateKey:
    """Read a hex seed file and derive its private key."""
    return private_key_from_seed(decode_seed(Path(path).read_bytes()))


def ed25519_sign(private_key: Ed25519PrivateKey, message: bytes) -> bytes:
    """Sign message with an Ed25519 private key."""
    return private_key.sign(message)


def ed25519_verify(
    public_key: Ed25519PublicKey, message: bytes, signature: bytes
) -> bool:
    """Verify an Ed25519 signature, returning False on mismatch."""
    if len(signature) != SIGNATURE_SIZE:
        return False
    try:
        public_key.verify(signature, message)
    except InvalidSignature:
        return False
    return True


def ed25519_sign_with_seed_file(path: str | Path, message: bytes) -> bytes:
    """Sign message with the private key derived from a seed file."""
    return ed25519_sign(private_key_from_seed_file(path), message)
