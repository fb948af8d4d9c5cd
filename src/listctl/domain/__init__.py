"""Domain layer — record model and ordering vocabulary.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
