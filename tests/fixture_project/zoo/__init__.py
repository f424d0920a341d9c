"""Public zoo API."""

from ._base import Animal
from .mammals import Mammal

__all__ = ["Animal", "Mammal"]
