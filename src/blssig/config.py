"""Runtime configuration for hashing and key generation.

The settings consumed by the signature layer are:
  - dst: the domain separation tag mixed into hash-to-curve.
  - hash_function: the 256-bit hash primitive used by expand_message_xmd.
  - random_bytes: the source of cryptographically secure randomness.

Settings are held in a context variable rather than a module global, so
threads and asyncio tasks that need different tags do not interfere with
each other. `settings_context` scopes a change to a `with` block; `configure`
changes the value for the current context.

Providers may be synchronous or asynchronous: a provider returning an
awaitable is only accepted by the `*_async` entry points.
"""
from __future__ import annotations

import contextvars
import logging
import secrets
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Iterator, Union

from Crypto.Hash import SHA256
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from blssig.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DST: str = "BLS_SIG_BLS12381G2_XMD:SHA-256_SSWU_RO_NUL_"
MAX_DST_LENGTH: int = 2048

HashFunction = Callable[[bytes], Union[bytes, Awaitable[bytes]]]
RandomBytes = Callable[[int], Union[bytes, Awaitable[bytes]]]


def sha256(message: bytes) -> bytes:
    """Default hash primitive: SHA-256 digest of `message`."""
    return SHA256.new(message).digest()


class Settings(BaseModel):
    """Immutable snapshot of the hashing and randomness configuration.

    Attributes:
        dst: Domain separation tag, 1 to 2048 characters.
        hash_function: Callable mapping bytes to a 32-byte digest, or to an
            awaitable of one.
        random_bytes: Callable mapping a length to that many random bytes, or
            to an awaitable of them.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    dst: str = Field(DEFAULT_DST, strict=True, min_length=1, max_length=MAX_DST_LENGTH)
    hash_function: Callable[..., Any] = sha256
    random_bytes: Callable[..., Any] = secrets.token_bytes


_settings: contextvars.ContextVar[Settings] = contextvars.ContextVar(
    "blssig_settings", default=Settings()
)


def _build(**changes: Any) -> Settings:
    current = get_settings()
    try:
        return Settings.model_validate({**dict(current), **changes})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


def get_settings() -> Settings:
    return _settings.get()


def configure(**changes: Any) -> Settings:
    """Replaces fields of the settings visible in the current context.

    Args:
        **changes: Any of `dst`, `hash_function`, `random_bytes`.

    Returns:
        The new active Settings.

    Raises:
        ConfigurationError: If a value fails validation.
    """
    settings = _build(**changes)
    _settings.set(settings)
    logger.debug("blssig settings updated: %s", sorted(changes))
    return settings


@contextmanager
def settings_context(**changes: Any) -> Iterator[Settings]:
    """Applies `changes` for the duration of a `with` block.

    Example:
        with settings_context(dst="MY_APP_V1"):
            point = hash_to_g2(b"hello")
    """
    token = _settings.set(_build(**changes))
    try:
        yield _settings.get()
    finally:
        _settings.reset(token)


def get_dst_label() -> str:
    return get_settings().dst


def set_dst_label(label: str) -> None:
    """Sets the domain separation tag for the current context.

    Raises:
        ConfigurationError: If `label` is not a string of 1 to 2048 characters.
    """
    if not isinstance(label, str):
        raise ConfigurationError(f"Invalid DST: expected str, got {type(label).__name__}")
    configure(dst=label)


def resolve_dst(dst: str | None = None) -> str:
    """Returns `dst` after validation, or the context's tag when `dst` is None."""
    if dst is None:
        return get_dst_label()
    if not isinstance(dst, str) or not 1 <= len(dst) <= MAX_DST_LENGTH:
        raise ConfigurationError(f"Invalid DST: must be a string of 1 to {MAX_DST_LENGTH} characters")
    return dst


__all__ = [
    "DEFAULT_DST",
    "MAX_DST_LENGTH",
    "Settings",
    "sha256",
    "get_settings",
    "configure",
    "settings_context",
    "get_dst_label",
    "set_dst_label",
    "resolve_dst",
]
