"""Type definitions for signing key pairs and their algorithm tags."""

from enum import StrEnum

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from pydantic import BaseModel, ConfigDict

PrivateKey = Ed25519PrivateKey | RSAPrivateKey
PublicKey = Ed25519PublicKey | RSAPublicKey


class KeyFamily(StrEnum):
    """Supported asymmetric key families."""

    ED25519 = "ed25519"
    RSA = "rsa"

    @property
    def algorithm(self) -> str:
        """JWT algorithm identifier written to the token header."""
        return _ALGORITHMS[self]


_ALGORITHMS = {
    KeyFamily.ED25519: "EdDSA",
    KeyFamily.RSA: "RS256",
}


class KeyPair(BaseModel):
    """A public key, its family tag and, when available, the private half."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    family: KeyFamily
    public_key: PublicKey
    private_key: PrivateKey | None = None

    @property
    def algorithm(self) -> str:
        """JWT algorithm identifier used when signing with this pair."""
        return self.family.algorithm
