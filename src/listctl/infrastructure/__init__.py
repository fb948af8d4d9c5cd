"""Infrastructure layer — database engine, introspection, item store.

This layer depends on stdlib and third-party libs (SQLAlchemy).
It must never import from services, commands, or output.
"""
