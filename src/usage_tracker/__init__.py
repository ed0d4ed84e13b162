"""Turn foreground window samples into clean usage sessions."""

__version__ = "0.1.0"
