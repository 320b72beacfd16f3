"""
Ambient Session Lookup - Where the active tsuru target and token live.

The tsuru client keeps the active target and the user's token under
``~/.tsuru`` (or ``$TSURU_HOME``). Environment variables ``TSURU_TARGET``
and ``TSURU_TOKEN`` override the files. Implementations of SessionLookup
are injected into the ConnectionResolver.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Mapping, Optional

from errors import ResolutionError

logger = logging.getLogger(__name__)


class SessionLookup(ABC):
    """Abstract lookup for the ambient target host and token."""

    @abstractmethod
    def get_target(self) -> str:
        """
        Return the active target host URL.

        Raises:
            ResolutionError: If no target is configured.
        """
        pass

    @abstractmethod
    def get_token(self) -> str:
        """
        Return the authentication token for the active target.

        Raises:
            ResolutionError: If no token is available.
        """
        pass


class StaticSessionLookup(SessionLookup):
    """Lookup returning fixed values."""

    def __init__(self, target: str = "", token: str = ""):
        self._target = target
        self._token = token

    def get_target(self) -> str:
        if not self._target:
            raise ResolutionError("no target configured")
        return self._target

    def get_token(self) -> str:
        if not self._token:
            raise ResolutionError("no token configured")
        return self._token


def normalize_target(target: str) -> str:
    """Add a scheme to a bare host and strip trailing slashes."""
    target = target.strip()
    if not target.startswith(("http://", "https://")):
        target = "http://" + target
    return target.rstrip("/")


class TsuruSessionLookup(SessionLookup):
    """Lookup backed by the tsuru client's files and environment."""

    def __init__(
        self,
        home: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._environ = os.environ if environ is None else environ
        if home is None:
            tsuru_home = self._environ.get("TSURU_HOME")
            home = Path(tsuru_home) if tsuru_home else Path.home() / ".tsuru"
        self.home = Path(home)

    def _read(self, name: str) -> str:
        path = self.home / name
        try:
            return path.read_text().strip()
        except FileNotFoundError as e:
            raise ResolutionError(f"{path} not found") from e
        except OSError as e:
            raise ResolutionError(f"could not read {path}: {e}") from e

    def _targets(self) -> Dict[str, str]:
        """Parse the ``targets`` file (``label url`` per line)."""
        path = self.home / "targets"
        if not path.exists():
            return {}
        try:
            content = path.read_text()
        except OSError as e:
            raise ResolutionError(f"could not read {path}: {e}") from e
        targets = {}
        for line in content.splitlines():
            parts = line.split()
            if len(parts) == 2:
                targets[parts[0]] = parts[1]
        return targets

    def get_target(self) -> str:
        target = self._environ.get("TSURU_TARGET", "").strip()
        if not target:
            try:
                target = self._read("target")
            except ResolutionError as e:
                raise ResolutionError(
                    f"no target set: use 'tsuru target add' or TSURU_TARGET ({e})"
                ) from e
        if not target:
            raise ResolutionError("no target set: target file is empty")

        # A target may be referenced by its label
        target = self._targets().get(target, target)
        logger.debug(f"Resolved tsuru target: {target}")
        return normalize_target(target)

    def get_token(self) -> str:
        token = self._environ.get("TSURU_TOKEN", "").strip()
        if token:
            return token
        try:
            token = self._read("token")
        except ResolutionError as e:
            raise ResolutionError(
                f"no token available: use 'tsuru login' or TSURU_TOKEN ({e})"
            ) from e
        if not token:
            raise ResolutionError("no token available: token file is empty")
        return token
