from __future__ import annotations


class DXFError(Exception):
    """Base class for errors raised by tailordxf."""


class DXFOpenError(DXFError):
    """The source file could not be opened; nothing was parsed."""


class ReadCancelled(DXFError):
    """The parse was stopped by the cancel callback or the timeout."""
