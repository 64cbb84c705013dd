"""Exception types raised by intentmap."""

from __future__ import annotations


class IntentMapError(Exception):
    """Base exception for intentmap."""


class AnchorSyntaxError(IntentMapError, ValueError):
    """Raised when anchor text cannot be parsed into an anchor spec."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"Invalid anchor '{text}': {reason}")
        self.text = text
        self.reason = reason


class ConfigError(IntentMapError, RuntimeError):
    """Raised when the configuration file cannot be parsed."""


__all__ = ["AnchorSyntaxError", "ConfigError", "IntentMapError"]
