# Token Store — per-provider credential held in memory and persisted to <provider>_auth.json.
# Created: 2026-10-12
#
# The credential is an immutable value: readers take a snapshot reference,
# writers install a new object under the store lock. Files are chmod 0600.

from __future__ import annotations

import asyncio
import json
import logging
import os
import stat
from dataclasses import asdict, dataclass, field, fields
from functools import cache
from pathlib import Path
from typing import Any, ClassVar, Generic, Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError

from socialauth.integrations.errors import (
    CorruptCredentialError,
    NoCredentialError,
    PersistenceError,
)

logger = logging.getLogger(__name__)


class Credential(Protocol):
    def to_dict(self) -> dict[str, Any]: ...


C = TypeVar("C", bound=Credential)


@cache
def _adapter(cls: type) -> TypeAdapter:
    return TypeAdapter(cls)


class _CredentialMixin:
    """JSON helpers shared by the frozen credential dataclasses."""

    _required: ClassVar[tuple[str, ...]] = ()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]

    @classmethod
    def from_dict(cls, data: Any):
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        missing = [k for k in cls._required if not data.get(k)]
        if missing:
            raise ValueError(f"missing field(s): {', '.join(missing)}")
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        try:
            return _adapter(cls).validate_python({k: v for k, v in data.items() if k in known})
        except ValidationError as e:
            bad = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise ValueError(f"invalid field(s): {', '.join(bad)}") from e


@dataclass(frozen=True)
class TwitchCredential(_CredentialMixin):
    """Twitch user access token as returned by the token endpoint."""

    _required: ClassVar[tuple[str, ...]] = ("access_token",)

    access_token: str
    refresh_token: str | None = None
    expires_in: int = 0  # Seconds, as reported when issued
    scope: list[str] = field(default_factory=list)
    token_type: str = "bearer"


@dataclass(frozen=True)
class TwitterCredential(_CredentialMixin):
    """OAuth 1.0a access token pair for the operator's Twitter account."""

    _required: ClassVar[tuple[str, ...]] = ("oauth_token", "oauth_token_secret")

    oauth_token: str
    oauth_token_secret: str
    user_id: str | None = None
    screen_name: str | None = None


class CredentialStore(Generic[C]):
    """Holds the current credential for one provider.

    File: ``<directory>/<provider>_auth.json``. A missing file means "not yet
    connected"; a present but unparseable file is fatal at load time.
    """

    def __init__(self, provider: str, credential_cls: type[C], directory: Path):
        self.provider = provider
        self.credential_cls = credential_cls
        self.path = directory / f"{provider}_auth.json"
        # Guards the in-memory credential; never held across network calls
        self.lock = asyncio.Lock()
        self._credential: C | None = None

    def load(self) -> C | None:
        """Read the persisted credential. Raises CorruptCredentialError on bad data."""
        try:
            raw = self.path.read_text()
        except FileNotFoundError:
            logger.info("No stored %s credential at %s", self.provider, self.path)
            self._credential = None
            return None
        except OSError as e:
            raise CorruptCredentialError(f"cannot read {self.path}: {e}") from e

        try:
            credential = self.credential_cls.from_dict(json.loads(raw))  # type: ignore[attr-defined]
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            raise CorruptCredentialError(f"invalid {self.path.name}: {e}") from e

        self._credential = credential
        logger.info("Loaded %s credential from %s", self.provider, self.path)
        return credential

    def get(self) -> C | None:
        """Snapshot of the current credential (None when not connected)."""
        return self._credential

    async def replace(self, credential: C) -> None:
        """Install a new credential and persist it.

        Equal credentials are a no-op. If the write fails the new credential
        stays installed in memory and PersistenceError is raised.
        """
        async with self.lock:
            if credential == self._credential and self.path.exists():
                return
            self._credential = credential
            try:
                await asyncio.to_thread(self._write, credential)
            except OSError as e:
                logger.error("Failed to persist %s credential to %s: %s", self.provider, self.path, e)
                raise PersistenceError(
                    f"{self.provider} credential obtained but not saved: {e}"
                ) from e
        logger.info("Saved %s credential", self.provider)

    def _write(self, credential: C) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(credential.to_dict(), indent=2))
        os.chmod(tmp, stat.S_IRUSR | stat.S_IWUSR)
        os.replace(tmp, self.path)

    def is_connected(self) -> bool:
        """Whether a credential file exists for this provider."""
        return self.path.exists()

    def read_raw(self) -> bytes:
        """Raw persisted credential, as stored on disk."""
        try:
            return self.path.read_bytes()
        except FileNotFoundError as e:
            raise NoCredentialError(self.provider) from e
        except OSError as e:
            raise PersistenceError(str(e)) from e
