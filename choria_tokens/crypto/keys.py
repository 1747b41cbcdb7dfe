"""Key pair construction from seeds, PEM blocks, key objects and files."""

from pathlib import Path
from typing import assert_never

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from choria_tokens.core.errors import InvalidKeyMaterial, UnsupportedKeyType
from choria_tokens.crypto.ed25519 import (
    decode_seed,
    is_encoded_ed25519_key,
    private_key_from_seed,
)
from choria_tokens.crypto.types import KeyFamily, KeyPair

_PEM_MARKER = b"-----BEGIN"


def key_pair_from_seed(seed: bytes) -> KeyPair:
    """Build an Ed25519 key pair from a raw 32 byte seed."""
    private_key = private_key_from_seed(seed)
    return KeyPair(
        family=KeyFamily.ED25519,
        public_key=private_key.public_key(),
        private_key=private_key,
    )


def key_pair_from_seed_file(path: str | Path) -> KeyPair:
    """Build an Ed25519 key pair from a file holding the hex seed."""
    return key_pair_from_seed(decode_seed(Path(path).read_bytes()))


def key_pair_from_key(key: object) -> KeyPair:
    """Wrap a cryptography key object, tagging it with its family."""
    match key:
        case Ed25519PrivateKey():
            return KeyPair(
                family=KeyFamily.ED25519, public_key=key.public_key(), private_key=key
            )
        case Ed25519PublicKey():
            return KeyPair(family=KeyFamily.ED25519, public_key=key)
        case RSAPrivateKey():
            return KeyPair(
                family=KeyFamily.RSA, public_key=key.public_key(), private_key=key
            )
        case RSAPublicKey():
            return KeyPair(family=KeyFamily.RSA, public_key=key)
        case _:
            raise UnsupportedKeyType(
                f"unsupported key type {type(key).__name__}"
            )


def key_pair_from_pem(data: bytes | str) -> KeyPair:
    """Parse a PEM encoded RSA private or public key."""
    if isinstance(data, str):
        data = data.encode()
    if _PEM_MARKER not in data:
        raise InvalidKeyMaterial("no PEM data found")

    loaded: object
    try:
        if b"PRIVATE KEY" in data:
            loaded = serialization.load_pem_private_key(data, password=None)
        else:
            loaded = serialization.load_pem_public_key(data)
    except (ValueError, TypeError) as err:
        raise InvalidKeyMaterial(f"could not parse PEM key: {err}") from err

    if not isinstance(loaded, RSAPrivateKey | RSAPublicKey):
        raise UnsupportedKeyType(
            f"unsupported PEM key type {type(loaded).__name__}"
        )
    return key_pair_from_key(loaded)


def load_key_pair(path: str | Path) -> KeyPair:
    """Load an Ed25519 seed file or an RSA PEM file."""
    data = Path(path).read_bytes()
    if is_encoded_ed25519_key(data.strip()):
        return key_pair_from_seed(decode_seed(data))
    return key_pair_from_pem(data)


def encode_public_key(public_key: object) -> str:
    """Encode a public key for embedding in claims.

    Ed25519 keys are written as the hex of their raw 32 bytes, RSA keys as a
    SubjectPublicKeyInfo PEM block.
    """
    pair = key_pair_from_key(public_key)
    match pair.family:
        case KeyFamily.ED25519:
            return pair.public_key.public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            ).hex()
        case KeyFamily.RSA:
            return pair.public_key.public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            ).decode()
        case _:
            assert_never(pair.family)


def decode_public_key(encoded: str) -> Ed25519PublicKey | RSAPublicKey:
    """Decode a public key previously produced by encode_public_key."""
    if is_encoded_ed25519_key(encoded):
        return Ed25519PublicKey.from_public_bytes(bytes.fromhex(encoded))
    pair = key_pair_from_pem(encoded)
    return pair.public_key
