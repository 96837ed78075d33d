"""Sleep logging server with interval validation and sleep statistics."""

__version__ = "0.1.0"
