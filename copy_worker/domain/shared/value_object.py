"""Base ValueObject class for domain model.

A value object is immutable and compared by the values of its attributes.
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class ValueObject(ABC):
    """Base class for all domain value objects.

    Example:
        >>> @dataclass(frozen=True)
        ... class AssetPair(ValueObject):
        ...     base: str
        ...     quote: str

        >>> AssetPair("BTC", "USDT") == AssetPair("BTC", "USDT")  # True
    """

    def __post_init__(self) -> None:
        """Hook for validation after initialization.

        Raises:
            ValueError: If validation fails.
        """
        pass


def validate_value_object(condition: bool, message: str) -> None:
    """Raise ValueError with message if condition is False.

    Example:
        >>> validate_value_object(amount >= 0, "Amount must be non-negative")
    """
    if not condition:
        raise ValueError(message)
