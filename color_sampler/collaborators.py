"""Interfaces for the persistence layer that consumes picked colors."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Protocol, runtime_checkable

from .color.convert import normalize_hex
from .core.logging_utils import get_module_logger

logger = get_module_logger(__name__)


class SaveOutcome(str, Enum):
    SAVED = "saved"
    DUPLICATE_NAME = "duplicate-name"  # blocking
    DUPLICATE_VALUE = "duplicate-value"  # needs confirmation


@runtime_checkable
class SwatchStore(Protocol):
    def save(self, name: str, hex_color: str, *, confirm: bool = False) -> SaveOutcome:
        ...


class InMemorySwatchStore:
    """Dict-backed SwatchStore.

    Names compare case-insensitively. A color already stored under another
    name is only saved again when ``confirm`` is set.
    """

    def __init__(self) -> None:
        self._swatches: Dict[str, tuple[str, str]] = {}

    def __len__(self) -> int:
        return len(self._swatches)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip().casefold() in self._swatches

    def get(self, name: str) -> str | None:
        entry = self._swatches.get(name.strip().casefold())
        return entry[1] if entry else None

    def names(self) -> list[str]:
        return [display for display, _ in self._swatches.values()]

    def save(self, name: str, hex_color: str, *, confirm: bool = False) -> SaveOutcome:
        display = name.strip()
        if not display:
            raise ValueError("Swatch name must not be empty")
        value = normalize_hex(hex_color)
        key = display.casefold()

        if key in self._swatches:
            logger.debug("Swatch name %r already taken", display)
            return SaveOutcome.DUPLICATE_NAME
        if not confirm and any(existing == value for _, existing in self._swatches.values()):
            logger.debug("Color #%s already saved under another name", value)
            return SaveOutcome.DUPLICATE_VALUE

        self._swatches[key] = (display, value)
        logger.info("Saved swatch %r (#%s)", display, value)
        return SaveOutcome.SAVED


__all__ = ["InMemorySwatchStore", "SaveOutcome", "SwatchStore"]
