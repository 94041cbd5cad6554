# layout_errors.py


class LayoutError(Exception):
    """Base class for errors raised by the layout engine."""


class CursorInvariantError(LayoutError):
    """
    The write cursor left the printable band of the page, or a plan was about
    to be applied past the bottom margin. Output can no longer be trusted.
    """


class NegativeHeightError(LayoutError):
    pass


class MalformedAnnexError(ValueError):
    """Raised while decoding an optional annex; never escapes annexes.py."""


class ResourceUnavailableError(LookupError):
    """A font or image asset could not be loaded."""
