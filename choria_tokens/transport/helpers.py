"""Broker connection credentials derived from a client or server token."""

import hashlib
import logging
from collections.abc import Callable
from pathlib import Path
from typing import NamedTuple

from choria_tokens.claims.types import ClientIDClaims, Purpose, ServerClaims
from choria_tokens.core.errors import (
    InvalidClaims,
    MissingParameter,
    UnsupportedPurpose,
)
from choria_tokens.crypto.ed25519 import ed25519_sign_with_seed_file
from choria_tokens.protocol.inspection import inspect_token

_log = logging.getLogger(__name__)


class ConnectionHelpers(NamedTuple):
    """Private reply inbox, token accessor and nonce signer for a connection."""

    inbox: str
    token_func: Callable[[], str]
    sign_func: Callable[[bytes], bytes]


def inbox_for(collective: str, identity: str) -> str:
    """Private reply subject for identity within collective."""
    digest = hashlib.md5(identity.encode(), usedforsecurity=False).hexdigest()
    return f"{collective}.reply.{digest}"


def _identity(token: str) -> str:
    inspected = inspect_token(token)
    match inspected.purpose:
        case Purpose.CLIENT:
            caller = inspected.claims_as(ClientIDClaims).caller_id
            if not caller:
                raise InvalidClaims("no caller in token")
            return caller
        case Purpose.SERVER:
            identity = inspected.claims_as(ServerClaims).identity
            if not identity:
                raise InvalidClaims("no server identity in token")
            return identity
        case _:
            raise UnsupportedPurpose(inspected.purpose)


def nats_connection_helpers(
    token: str,
    collective: str,
    seed_file: str | Path,
    log: logging.Logger | None = None,
) -> ConnectionHelpers:
    """Derive the inbox, token accessor and signer used to connect a client.

    Only client and server tokens can be used to connect. The token is
    inspected, not verified; the broker verifies it on connection.
    """
    log = log or _log
    if not collective:
        raise MissingParameter("collective is required")
    if not seed_file:
        raise MissingParameter("seedfile is required")

    inbox = inbox_for(collective, _identity(token))
    log.debug("Using inbox %s", inbox)

    def token_func() -> str:
        return token

    def sign_func(data: bytes) -> bytes:
        log.debug("Signing nonce using seed file %s", seed_file)
        return ed25519_sign_with_seed_file(seed_file, data)

    return ConnectionHelpers(inbox=inbox, token_func=token_func, sign_func=sign_func)
