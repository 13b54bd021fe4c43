# rpg_dice/compare_point.py
import operator as _operator
from typing import Callable, Dict

from .exceptions import CompareOperatorError, RequiredArgumentError

OPERATORS: Dict[str, Callable[[int, int], bool]] = {
    "=": _operator.eq,
    "!=": _operator.ne,
    "<>": _operator.ne,
    "<": _operator.lt,
    ">": _operator.gt,
    "<=": _operator.le,
    ">=": _operator.ge,
}


class ComparePoint:
    """A comparison against a fixed value, e.g. `>=5`."""

    def __init__(self, operator: str, value: int):
        if not operator:
            raise RequiredArgumentError("operator")
        if operator not in OPERATORS:
            raise CompareOperatorError(operator)
        if value is None:
            raise RequiredArgumentError("value")
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"value must be an integer, received {value!r}")

        self.operator = operator
        self.value = value

    def is_match(self, value: int) -> bool:
        return OPERATORS[self.operator](value, self.value)

    def to_json(self) -> Dict[str, object]:
        return {
            "operator": self.operator,
            "type": "compare-point",
            "value": self.value,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, ComparePoint):
            return NotImplemented
        return self.operator == other.operator and self.value == other.value

    def __repr__(self) -> str:
        return f"ComparePoint({self.operator!r}, {self.value!r})"

    def __str__(self) -> str:
        return f"{self.operator}{self.value}"
