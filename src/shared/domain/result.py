"""
Result type for service operations
Carries either a value or the expected business error, never both
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True)
class Success(Generic[T]):
    """
    Successful outcome.

    Attributes:
        value: The produced value (may be None for commands without output)
    """

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    """
    Failed outcome caused by an expected business error.

    Attributes:
        error: The domain or not-found error that stopped the operation
    """

    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    @property
    def value(self) -> None:
        return None

    def unwrap(self) -> None:
        """
        Re-raise the carried error.

        Raises:
            E: The original error
        """
        raise self.error


Result = Union[Success[T], Failure[E]]
