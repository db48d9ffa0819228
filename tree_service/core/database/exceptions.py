"""Errors raised by repositories.

They carry the model name and lookup keys so the HTTP layer can build a
problem response without parsing messages.
"""

from __future__ import annotations

from typing import Any


def _format_pairs(values: dict[str, Any]) -> str:
    return ", ".join(f"{key}={value!r}" for key, value in values.items())


class RepositoryError(Exception):
    """A repository was misused or found the database in an unexpected state."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} ({_format_pairs(self.details)})"


class NotFoundError(RepositoryError):
    """No row of ``model_name`` matches ``identifier``, e.g. ``{"id": 123}``."""

    def __init__(self, model_name: str, identifier: dict[str, Any]):
        self.model_name = model_name
        self.identifier = identifier
        super().__init__(
            f"{model_name} not found with {_format_pairs(identifier)}",
            details={"model": model_name, **identifier},
        )

    def __repr__(self) -> str:
        return f"NotFoundError(model={self.model_name!r}, identifier={self.identifier!r})"


__all__ = ["NotFoundError", "RepositoryError"]
