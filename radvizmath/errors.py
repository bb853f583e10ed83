"""
Exceptions raised by the RadViz math package.

Degenerate values (constant columns, zero-sum observations) are normally
carried through the pipeline as NaN. The exceptions below are reserved for
structurally invalid requests, plus DegenerateVariableError for callers that
explicitly ask for strict checking.
"""

from typing import Iterable, Any


class RadvizError(ValueError):
    """Base class for all RadViz math errors."""


class DegenerateVariableError(RadvizError):
    """
    A variable has zero range or zero variance.

    Only raised in strict mode; otherwise the affected cells are NaN.
    """

    def __init__(self, labels: Iterable[Any], reason: str = "zero range"):
        self.labels = list(labels)
        self.reason = reason
        super().__init__(f"Degenerate variables ({reason}): {self.labels}")


class DegenerateOrderingError(RadvizError):
    """Fewer than two anchors were requested."""


class OrderingMismatchError(RadvizError):
    """An anchor ordering does not match the available variables."""
