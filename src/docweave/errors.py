"""Exception types raised by docweave."""


class DocweaveError(Exception):
    """Base class for all fatal docweave errors."""


class ConfigError(DocweaveError):
    """Invalid or incomplete configuration."""


class DocumentationError(DocweaveError):
    """The documentation tree is inconsistent (duplicate items, missing home file...)."""


class StrictModeError(DocweaveError):
    """Warnings were reported while running with --fail-on-warning."""
