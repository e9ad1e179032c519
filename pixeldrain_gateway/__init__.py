"""Local HTTP gateway in front of the Pixeldrain file-hosting API."""

__version__ = "1.0.0"
