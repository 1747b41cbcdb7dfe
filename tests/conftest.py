"""Shared test fixtures for choria-tokens."""

from pathlib import Path
from typing import NamedTuple

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from choria_tokens.claims.builders import new_provisioning_claims
from choria_tokens.crypto.keys import key_pair_from_seed, load_key_pair
from choria_tokens.crypto.types import KeyPair
from choria_tokens.protocol.signing import sign_token

SIGNER_SEED = "8e306060341f7eb867c7d09609d53bfa9e6cb38ca744c0dca548572cc3080b6a"
OTHER_SEED = "1f5bcd09026ef84134d0963c17d6df388366a8767b418c209168dc8bb579f82b"


class KeyFiles(NamedTuple):
    """Paths to the key material written for a test session."""

    signer_seed: Path
    other_seed: Path
    signer_rsa_key: Path
    signer_rsa_public: Path
    other_rsa_key: Path
    other_rsa_public: Path


def _write_rsa(directory: Path, name: str) -> tuple[Path, Path]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    key_file = directory / f"{name}-key.pem"
    key_file.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    public_file = directory / f"{name}-public.pem"
    public_file.write_bytes(
        key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )
    return key_file, public_file


@pytest.fixture(scope="session")
def key_files(tmp_path_factory: pytest.TempPathFactory) -> KeyFiles:
    """Write Ed25519 seed files and RSA PEM files to a session directory."""
    directory = tmp_path_factory.mktemp("keys")
    signer_seed = directory / "signer.seed"
    signer_seed.write_text(SIGNER_SEED)
    other_seed = directory / "other.seed"
    other_seed.write_text(OTHER_SEED)
    signer_key, signer_public = _write_rsa(directory, "signer")
    other_key, other_public = _write_rsa(directory, "other")
    return KeyFiles(
        signer_seed=signer_seed,
        other_seed=other_seed,
        signer_rsa_key=signer_key,
        signer_rsa_public=signer_public,
        other_rsa_key=other_key,
        other_rsa_public=other_public,
    )


@pytest.fixture
def signer_ed25519() -> KeyPair:
    """Ed25519 key pair that signs the fixture tokens."""
    return key_pair_from_seed(bytes.fromhex(SIGNER_SEED))


@pytest.fixture
def other_ed25519() -> KeyPair:
    """Ed25519 key pair unrelated to the fixture tokens."""
    return key_pair_from_seed(bytes.fromhex(OTHER_SEED))


@pytest.fixture
def signer_rsa(key_files: KeyFiles) -> KeyPair:
    """RSA key pair that signs the fixture tokens."""
    return load_key_pair(key_files.signer_rsa_key)


@pytest.fixture
def other_rsa_public(key_files: KeyFiles) -> KeyPair:
    """RSA public key unrelated to the fixture tokens."""
    return load_key_pair(key_files.other_rsa_public)


@pytest.fixture
def signer_rsa_public(key_files: KeyFiles) -> KeyPair:
    """Public half of the RSA signer loaded from its PEM file."""
    return load_key_pair(key_files.signer_rsa_public)


def _provisioning_token(key: KeyPair) -> str:
    claims = new_provisioning_claims(
        True, True, "x", "", "", None, "example.net", "", "", "choria", "", None
    )
    return sign_token(claims, key)


@pytest.fixture
def prov_jwt_ed25519(signer_ed25519: KeyPair) -> str:
    """Provisioning token signed with the Ed25519 signer."""
    return _provisioning_token(signer_ed25519)


@pytest.fixture
def prov_jwt_rsa(signer_rsa: KeyPair) -> str:
    """Provisioning token signed with the RSA signer."""
    return _provisioning_token(signer_rsa)
