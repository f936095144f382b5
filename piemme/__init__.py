"""piemme - A terminal prompt manager with a modal editor."""

__version__ = "0.1.0"
