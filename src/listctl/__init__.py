"""listctl — scoped, gap-free list ordering over SQLAlchemy Core."""

__version__ = "0.1.0"
