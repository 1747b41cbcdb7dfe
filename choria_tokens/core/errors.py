"""Exception hierarchy for token construction, signing and verification."""


class TokenError(Exception):
    """Base class for every failure raised by choria_tokens."""


class InvalidKeyMaterial(TokenError):
    """Key material could not be decoded or parsed."""


class InvalidSeedLength(InvalidKeyMaterial):
    """A decoded Ed25519 seed is not exactly 32 bytes."""


class UnsupportedKeyType(TokenError):
    """The key or signing algorithm is neither Ed25519 nor RSA."""


class InvalidClaims(TokenError):
    """Claims are incomplete or do not match the expected purpose."""


class SigningFailure(TokenError):
    """The signing operation could not produce a token."""


class MissingKey(TokenError):
    """No public key was supplied for verification."""


class KeyTypeMismatch(TokenError):
    """The supplied key family does not match the token algorithm."""


class SignatureInvalid(TokenError):
    """The token signature did not verify against the supplied key."""

    def __init__(self, message: str, algorithm: str) -> None:
        super().__init__(message)
        self.algorithm = algorithm


class TokenExpired(TokenError):
    """The token signature is valid but its expiry time has passed."""


class InvalidToken(TokenError):
    """The token is structurally malformed or otherwise rejected."""


class MissingParameter(TokenError):
    """A required argument was empty."""


class UnsupportedPurpose(TokenError):
    """The token purpose cannot be used for the requested operation."""

    def __init__(self, purpose: str) -> None:
        super().__init__(f"unsupported token purpose: {purpose}")
        self.purpose = purpose
