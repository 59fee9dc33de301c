"""In-memory users resource served over HTTP with FastAPI."""

__version__ = "0.1.0"
