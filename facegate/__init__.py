"""Face registration and area-ratio face matching behind a small HTTP API."""

__version__ = "0.1.0"
