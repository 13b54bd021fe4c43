# rpg_dice/modifiers.py
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .compare_point import ComparePoint
from .config import settings
from .exceptions import DiceRangeError, DieActionValueError
from .logger import logger
from .models import RollResult, RollResults

if TYPE_CHECKING:
    from .dice import StandardDice

# ===================================================================
# Modifier Base Classes
# ===================================================================


class Modifier:
    """
    Base class for everything that transforms a die's roll results.

    Modifiers run in ascending `order`. Each one receives the current
    RollResults and the die that produced them, and returns the RollResults
    for the next modifier. A modifier may flag, overwrite or append entries
    but never changes the die itself.
    """

    name = "modifier"

    def __init__(self, notation: str = ""):
        self.notation = notation
        self.order = 999
        self.max_iterations = settings.max_iterations

    def validate(self, die: "StandardDice"):
        """Raises if this modifier cannot be used with `die`."""

    def apply(self, results: RollResults, die: "StandardDice") -> RollResults:
        return results

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "notation": self.notation,
            "type": "modifier",
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.notation!r})"

    def __str__(self) -> str:
        return self.notation


class ComparisonModifier(Modifier):
    """A modifier that acts on results matching a ComparePoint."""

    def __init__(self, notation: str = "", compare_point: Optional[ComparePoint] = None):
        super().__init__(notation)
        if compare_point is not None and not isinstance(compare_point, ComparePoint):
            raise TypeError(f"compare_point must be a ComparePoint, received {type(compare_point).__name__}")
        self.compare_point = compare_point

    def is_compare_point(self, value: int) -> bool:
        if self.compare_point is None:
            return False
        return self.compare_point.is_match(value)

    def to_json(self) -> Dict[str, Any]:
        data = super().to_json()
        data["comparePoint"] = self.compare_point.to_json() if self.compare_point else None
        return data


# ===================================================================
# Value Clamping
# ===================================================================


class MinModifier(Modifier):
    """Raises any result below `min` up to `min`."""

    name = "min"

    def __init__(self, notation: str, min: int):
        super().__init__(notation)
        if isinstance(min, bool) or not isinstance(min, int):
            raise TypeError(f"min must be an integer, received {min!r}")
        self.min = min
        self.order = 1

    def apply(self, results, die):
        for roll in results:
            if roll.value < self.min:
                roll.value = self.min
                roll.modifiers.add("min")
        return results

    def to_json(self):
        data = super().to_json()
        data["min"] = self.min
        return data


class MaxModifier(Modifier):
    """Lowers any result above `max` down to `max`."""

    name = "max"

    def __init__(self, notation: str, max: int):
        super().__init__(notation)
        if isinstance(max, bool) or not isinstance(max, int):
            raise TypeError(f"max must be an integer, received {max!r}")
        self.max = max
        self.order = 2

    def apply(self, results, die):
        for roll in results:
            if roll.value > self.max:
                roll.value = self.max
                roll.modifiers.add("max")
        return results

    def to_json(self):
        data = super().to_json()
        data["max"] = self.max
        return data


# ===================================================================
# Re-rolling Modifiers
# ===================================================================


class ExplodeModifier(ComparisonModifier):
    """
    Rolls an extra die each time a result matches the compare point.

    Compounding folds the extra rolls into the triggering result instead of
    appending them. Penetrating subtracts 1 from every extra roll, while the
    compare point is still checked against the unmodified face.
    """

    name = "explode"

    def __init__(
        self,
        notation: str = "!",
        compare_point: Optional[ComparePoint] = None,
        compound: bool = False,
        penetrate: bool = False,
    ):
        super().__init__(notation, compare_point)
        self.compound = bool(compound)
        self.penetrate = bool(penetrate)
        self.order = 3

    def validate(self, die):
        if die.min == die.max:
            raise DieActionValueError(die, "explode")

    def apply(self, results, die):
        compare_point = self.compare_point or ComparePoint("=", die.max)

        exploded: List[RollResult] = []
        for roll in results:
            chain = [roll]
            compare_value = roll.value
            iterations = 0

            while compare_point.is_match(compare_value) and iterations < self.max_iterations:
                previous = chain[-1]
                previous.modifiers.add("explode")
                extra = die.roll_once()
                # compare the raw face, before any penetration penalty
                compare_value = extra.value
                if self.penetrate:
                    previous.modifiers.add("penetrate")
                    extra.value -= 1
                chain.append(extra)
                iterations += 1

            if compare_point.is_match(compare_value):
                logger.warning(f"Explode on '{die}' stopped after {self.max_iterations} iterations.")

            if self.compound and len(chain) > 1:
                flags = set().union(*(r.modifiers for r in chain))
                flags.update({"explode", "compound"})
                exploded.append(RollResult(
                    value=sum(r.value for r in chain),
                    initial_value=roll.initial_value,
                    modifiers=flags,
                ))
            else:
                exploded.extend(chain)

        logger.debug(f"Explode on '{die}' produced {len(exploded) - len(results)} extra rolls.")
        results.rolls = exploded
        return results

    def to_json(self):
        data = super().to_json()
        data.update({"compound": self.compound, "penetrate": self.penetrate})
        return data


class ReRollModifier(ComparisonModifier):
    """Re-rolls results matching the compare point, replacing their value."""

    name = "re-roll"

    def __init__(self, notation: str = "r", once: bool = False, compare_point: Optional[ComparePoint] = None):
        super().__init__(notation, compare_point)
        self.once = bool(once)
        self.order = 4

    def apply(self, results, die):
        compare_point = self.compare_point or ComparePoint("=", die.min)

        flag = "re-roll-once" if self.once else "re-roll"
        limit = 1 if self.once else self.max_iterations
        for roll in results:
            iterations = 0
            while compare_point.is_match(roll.value) and iterations < limit:
                roll.value = die.roll_once().value
                roll.modifiers.add(flag)
                iterations += 1
            if not self.once and compare_point.is_match(roll.value):
                logger.warning(f"Re-roll on '{die}' stopped after {self.max_iterations} iterations.")
        return results

    def to_json(self):
        data = super().to_json()
        data["once"] = self.once
        return data


class UniqueModifier(ComparisonModifier):
    """
    Re-rolls results whose value has already been rolled.

    With a compare point, only duplicates matching it are re-rolled.
    """

    name = "unique"

    def __init__(self, notation: str = "u", once: bool = False, compare_point: Optional[ComparePoint] = None):
        super().__init__(notation, compare_point)
        self.once = bool(once)
        self.order = 5

    def is_duplicate(self, value: int, seen: set) -> bool:
        if value not in seen:
            return False
        return self.compare_point is None or self.is_compare_point(value)

    def apply(self, results, die):
        flag = "unique-once" if self.once else "unique"
        limit = 1 if self.once else self.max_iterations
        seen = set()
        for roll in results:
            iterations = 0
            while self.is_duplicate(roll.value, seen) and iterations < limit:
                roll.value = die.roll_once().value
                roll.modifiers.add(flag)
                iterations += 1
            if not self.once and self.is_duplicate(roll.value, seen):
                logger.warning(f"Unique on '{die}' stopped after {self.max_iterations} iterations.")
            seen.add(roll.value)
        return results

    def to_json(self):
        data = super().to_json()
        data["once"] = self.once
        return data


# ===================================================================
# Keep / Drop
# ===================================================================


class KeepModifier(Modifier):
    """Keeps the highest (`h`) or lowest (`l`) `qty` results and drops the rest."""

    name = "keep"

    def __init__(self, notation: str, end: str = "h", qty: int = 1):
        super().__init__(notation)
        if end not in ("h", "l"):
            raise DiceRangeError(f"End must be 'h' or 'l', received {end!r}")
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise TypeError(f"qty must be a positive integer, received {qty!r}")
        self.end = end
        self.qty = qty
        self.order = 6

    def rolls_to_drop(self, results: RollResults) -> List[int]:
        """Indexes of the results that fall outside the kept set."""
        by_value = sorted(range(len(results)), key=lambda i: results[i].value)
        if self.end == "h":
            return by_value[:max(len(by_value) - self.qty, 0)]
        return by_value[self.qty:]

    def apply(self, results, die):
        for index in self.rolls_to_drop(results):
            results[index].use_in_total = False
            results[index].modifiers.add("drop")
        return results

    def to_json(self):
        data = super().to_json()
        data.update({"end": self.end, "qty": self.qty})
        return data


class DropModifier(KeepModifier):
    """Drops the highest (`h`) or lowest (`l`) `qty` results."""

    name = "drop"

    def __init__(self, notation: str, end: str = "l", qty: int = 1):
        super().__init__(notation, end, qty)
        self.order = 7

    def rolls_to_drop(self, results):
        by_value = sorted(range(len(results)), key=lambda i: results[i].value)
        if self.end == "h":
            return by_value[max(len(by_value) - self.qty, 0):]
        return by_value[:self.qty]


# ===================================================================
# Success Counting & Criticals
# ===================================================================


class TargetModifier(ComparisonModifier):
    """
    Turns the roll into a success count.

    Matching the success compare point counts 1, matching the failure
    compare point counts -1, anything else counts 0.
    """

    name = "target"

    def __init__(
        self,
        notation: str,
        success_compare_point: ComparePoint,
        failure_compare_point: Optional[ComparePoint] = None,
    ):
        if success_compare_point is None:
            raise TypeError("success_compare_point must be a ComparePoint")
        super().__init__(notation, success_compare_point)
        if failure_compare_point is not None and not isinstance(failure_compare_point, ComparePoint):
            raise TypeError(
                f"failure_compare_point must be a ComparePoint, received {type(failure_compare_point).__name__}"
            )
        self.failure_compare_point = failure_compare_point
        self.order = 8

    @property
    def success_compare_point(self) -> ComparePoint:
        return self.compare_point

    def is_success(self, value: int) -> bool:
        return self.is_compare_point(value)

    def is_failure(self, value: int) -> bool:
        return self.failure_compare_point is not None and self.failure_compare_point.is_match(value)

    def apply(self, results, die):
        for roll in results:
            if self.is_success(roll.value):
                roll.calculation_value = 1
                roll.modifiers.add("target-success")
            elif self.is_failure(roll.value):
                roll.calculation_value = -1
                roll.modifiers.add("target-failure")
            else:
                roll.calculation_value = 0
        return results

    def to_json(self):
        data = super().to_json()
        data.pop("comparePoint")
        data["success"] = self.compare_point.to_json()
        data["failure"] = self.failure_compare_point.to_json() if self.failure_compare_point else None
        return data


class CriticalSuccessModifier(ComparisonModifier):
    """Flags results matching the compare point (default: the die's max)."""

    name = "critical-success"

    def __init__(self, notation: str = "cs", compare_point: Optional[ComparePoint] = None):
        super().__init__(notation, compare_point)
        self.order = 9

    def apply(self, results, die):
        compare_point = self.compare_point or ComparePoint("=", die.max)
        for roll in results:
            if compare_point.is_match(roll.value):
                roll.modifiers.add("critical-success")
        return results


class CriticalFailureModifier(ComparisonModifier):
    """Flags results matching the compare point (default: the die's min)."""

    name = "critical-failure"

    def __init__(self, notation: str = "cf", compare_point: Optional[ComparePoint] = None):
        super().__init__(notation, compare_point)
        self.order = 10

    def apply(self, results, die):
        compare_point = self.compare_point or ComparePoint("=", die.min)
        for roll in results:
            if compare_point.is_match(roll.value):
                roll.modifiers.add("critical-failure")
        return results


# ===================================================================
# Sorting
# ===================================================================


class SortingModifier(Modifier):
    """Sorts results ascending (`a`) or descending (`d`)."""

    name = "sorting"

    def __init__(self, notation: str = "s", direction: str = "a"):
        super().__init__(notation)
        if direction not in ("a", "d"):
            raise DiceRangeError(f"Direction must be 'a' or 'd', received {direction!r}")
        self.direction = direction
        self.order = 11

    def apply(self, results, die):
        results.rolls.sort(key=lambda roll: roll.value, reverse=self.direction == "d")
        return results

    def to_json(self):
        data = super().to_json()
        data["direction"] = self.direction
        return data
