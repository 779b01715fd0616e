"""docweave - merge markdown documentation from many repositories into one site."""

__version__ = "0.4.0"
