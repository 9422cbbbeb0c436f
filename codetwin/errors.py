"""Exception types raised by codetwin."""

from __future__ import annotations


class CodeTwinError(Exception):
    """Base class for all codetwin errors."""


class PolicyError(CodeTwinError):
    """A language rule failed; carries the language and method that raised."""

    def __init__(self, language: str, method: str, message: str, cause: Exception | None = None):
        self.language = language
        self.method = method
        full = f"{language}.{method}: {message}"
        if cause is not None:
            full += f" ({cause})"
        super().__init__(full)


class UnknownLanguageError(CodeTwinError):
    def __init__(self, language: str):
        self.language = language
        super().__init__(f"Language {language} not supported")


class FactsError(CodeTwinError):
    """A facts document could not be read or has an unexpected shape."""


class RenderError(CodeTwinError):
    """The injected renderer could not turn DOT text into an image."""
