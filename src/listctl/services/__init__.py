"""Service layer — ordering operations returning ServiceResult.

Services may import from domain, ordering and infrastructure layers.
They must never import from commands or output.
"""
