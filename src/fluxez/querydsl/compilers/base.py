"""Base compiler interface.

Defines the contract every descriptor compiler follows.
"""

from abc import ABC, abstractmethod
from typing import Any

__all__ = ("BaseCompiler",)


class BaseCompiler(ABC):
    """Abstract base class for query descriptor compilers.

    Subclasses implement `compile` for whole descriptors and `compile_conditions`
    for a condition tree on its own.
    """

    @abstractmethod
    def compile(self, descriptor: Any) -> Any:
        """Convert a QueryDescriptor (or builder) into the target representation."""
        raise NotImplementedError

    @abstractmethod
    def compile_conditions(self, nodes: Any) -> Any:
        """Convert an ordered list of condition nodes."""
        raise NotImplementedError
