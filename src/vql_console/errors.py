"""Application-level exception types for the VQL console."""

from __future__ import annotations


class ConsoleError(Exception):
    """Base exception for the VQL console."""


class ConfigurationError(ConsoleError):
    """Raised when startup configuration cannot be loaded."""


class EvaluatorNotConfiguredError(ConsoleError):
    """Raised when a statement needs an evaluator but no plugin provides one."""


class QueryParseError(ConsoleError):
    """Raised by evaluators when statement text cannot be parsed."""


class UploadError(ConsoleError):
    """Raised when the uploader refuses a destination."""
