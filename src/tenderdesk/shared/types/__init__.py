"""Type conversion helpers."""

from .conversion import ModelConverter

__all__ = ["ModelConverter"]
