from __future__ import annotations


class BookletError(Exception):
    """Base class for failures surfaced by the booklet pipeline."""


class InvalidDocument(BookletError):
    """The source has no pages or could not be read."""


class AssemblyFailure(BookletError):
    """A document operation failed while building the output."""
