"""Entitlement store.

Holds the record of a completed purchase.  With a ``path`` the record is
persisted as JSON and re-read on every lookup, so a purchase recorded by
another process is picked up on the next check.  Without one it lives in
memory for the life of the store.
"""
from __future__ import annotations

from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from models import Entitlement


class EntitlementNotFoundError(Exception):
    """Raised when no entitlement has been recorded."""

    def __init__(self) -> None:
        super().__init__("No entitlement recorded")


class EntitlementStore:
    """Single-record store for the subscription entitlement."""

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._entitlement: Entitlement | None = None

    @property
    def path(self) -> Path | None:
        return self._path

    # -- persistence ---------------------------------------------------------

    def _read(self) -> Entitlement | None:
        assert self._path is not None
        if not self._path.exists():
            return None
        try:
            return Entitlement.model_validate_json(
                self._path.read_text(encoding="utf-8")
            )
        except (OSError, UnicodeDecodeError, ValidationError):
            # Unreadable records count as no purchase.
            logger.exception("Could not load entitlement from {}", self._path)
            return None

    def _write(self, entitlement: Entitlement) -> None:
        assert self._path is not None
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(entitlement.model_dump_json(), encoding="utf-8")

    # -- operations ----------------------------------------------------------

    def load(self) -> Entitlement | None:
        """Return the current record, or None."""
        if self._path is not None:
            self._entitlement = self._read()
        return self._entitlement

    def get(self) -> Entitlement:
        entitlement = self.load()
        if entitlement is None:
            raise EntitlementNotFoundError()
        return entitlement

    def save(self, entitlement: Entitlement) -> Entitlement:
        if self._path is not None:
            self._write(entitlement)
        self._entitlement = entitlement
        logger.info("Entitlement saved for plan {}", entitlement.plan.value)
        return entitlement

    def is_entitled(self) -> bool:
        entitlement = self.load()
        return entitlement is not None and entitlement.is_paid

    def clear(self) -> None:
        """Forget the record (cancellation and the debug reset)."""
        if self._path is not None:
            self._path.unlink(missing_ok=True)
        self._entitlement = None
        logger.info("Entitlement cleared")
