"""
Sentinel objects for lookups where None is a meaningful answer.

Sentinels:
    NOT_FOUND: Indicates a failed lookup operation (alternative to None)

Example:
    >>> magnitude = table.lookup_exact("QnVt")
    >>> if magnitude is NOT_FOUND:
    ...     magnitude = fallback
"""

from typing import Any

__all__ = [
    'NOT_FOUND',
    'NotFoundType',
]


class NotFoundType:
    """
    Sentinel type for NOT_FOUND.

    Singleton, falsy, compared by identity and pickled back to the same instance.
    """
    __slots__ = ()

    _instance: 'NotFoundType | None' = None

    def __new__(cls) -> 'NotFoundType':
        """Ensures singleton behavior."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return '<NOT_FOUND>'

    def __eq__(self, other: Any) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> tuple:
        """Ensure pickling returns the singleton instance."""
        return (self.__class__, ())


NOT_FOUND = NotFoundType()
