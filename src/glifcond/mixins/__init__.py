"""Mixin classes for glifcond components.

Available Mixins:
- ResettableMixin: Standard interface for resetting component state
"""

from glifcond.mixins.resettable_mixin import ResettableMixin

__all__ = [
    'ResettableMixin',
]
