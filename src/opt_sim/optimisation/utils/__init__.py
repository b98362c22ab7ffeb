"""Optimisation utilities"""

from .factory import ObjectFactory, resolve_type

__all__ = [
    "ObjectFactory",
    "resolve_type",
]
