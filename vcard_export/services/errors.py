class VCardError(Exception):
    """Base class for every error raised while building or writing a vCard."""


class ValidationError(VCardError, ValueError):
    """The contact is missing a required name or holds an empty email or phone entry."""


class FormatError(VCardError, ValueError):
    """A value could not be turned into its vCard representation, e.g. a malformed date."""


class VCardIOError(VCardError, OSError):
    """Reading or writing a file failed. The original ``OSError`` is chained as ``__cause__``."""
