"""Exceptions raised while turning raw file text into package records."""

from __future__ import annotations


class ParseError(ValueError):
    """Base error for a file that could not be turned into package records."""


class StructuralParseError(ParseError):
    """Raised when content is not valid JSON/YAML for its declared format."""


class UnsupportedFormatError(ParseError):
    """Raised for a recognised file whose format generation is not supported."""
