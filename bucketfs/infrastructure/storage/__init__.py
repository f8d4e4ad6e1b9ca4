"""
Storage Infrastructure Module

Provides bucket-scoped object storage clients.
"""

from . import object_storage

__all__ = [
    'object_storage'
]
