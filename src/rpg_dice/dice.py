# rpg_dice/dice.py
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .exceptions import DiceRangeError, ReadOnlyAttributeError, RequiredArgumentError
from .logger import logger
from .models import RollResult, RollResults
from .modifiers import Modifier
from .random_source import generator

# ===================================================================
# Helpers
# ===================================================================


def _is_integer(value: Any) -> bool:
    # bool is an int subclass but never a valid count or side
    return isinstance(value, int) and not isinstance(value, bool)


def normalize_modifiers(modifiers: Any) -> Optional[Dict[str, Modifier]]:
    """
    Builds the canonical modifier mapping for a die.

    Accepts a mapping of name -> Modifier, a list/tuple of Modifier (keyed
    by each modifier's `name`, later entries replacing earlier ones), or
    None. The result is sorted by each modifier's `order`; ties keep the
    order they were supplied in.

    Returns:
        A dict in application order, or None if there are no modifiers.

    Raises:
        TypeError: If `modifiers` has an unsupported shape or holds a
            value that is not a Modifier.
    """
    if modifiers is None:
        return None

    if isinstance(modifiers, Mapping):
        entries = list(modifiers.items())
    elif isinstance(modifiers, (list, tuple)):
        entries = []
        for index, modifier in enumerate(modifiers):
            if not isinstance(modifier, Modifier):
                raise TypeError(f"Modifier at index {index} must be a Modifier, received {type(modifier).__name__}")
            entries.append((modifier.name, modifier))
    else:
        raise TypeError(f"modifiers must be a mapping, list or None, received {type(modifiers).__name__}")

    collected: Dict[str, Modifier] = {}
    for key, modifier in entries:
        if not isinstance(modifier, Modifier):
            raise TypeError(f"Modifier '{key}' must be a Modifier, received {type(modifier).__name__}")
        collected[key] = modifier

    if not collected:
        return None

    return dict(sorted(collected.items(), key=lambda item: item[1].order))


# ===================================================================
# Dice
# ===================================================================


class StandardDice:
    """
    A set of `qty` identical numeric dice, e.g. `3d6`.

    All other die types share this behaviour and only change how their
    bounds are derived and how a single face value is produced.
    """

    die_name = "standard"

    # Fixed at construction; assigning to any of these raises
    read_only_attributes: Tuple[str, ...] = (
        "die_name", "max", "min", "name", "notation", "qty", "read_only_attributes", "sides",
    )

    def __init__(self, notation: str, sides: Any, qty: int = 1, modifiers: Any = None):
        if not notation:
            raise RequiredArgumentError("notation")
        if not isinstance(notation, str):
            raise TypeError(f"notation must be a string, received {type(notation).__name__}")
        if not _is_integer(qty) or qty < 1:
            raise TypeError(f"qty must be a positive non-zero integer, received {qty!r}")

        self._notation = notation
        self._qty = qty
        self._sides, self._min, self._max = self._derive_bounds(sides)
        self._modifiers: Optional[Dict[str, Modifier]] = None
        self.modifiers = modifiers

    def _derive_bounds(self, sides: Any) -> Tuple[Any, int, int]:
        """Validates `sides` and returns (sides, min, max)."""
        if sides is None or sides is False:
            raise RequiredArgumentError("sides")
        if not _is_integer(sides):
            raise TypeError(f"sides must be an integer, received {sides!r}")
        if sides < 1:
            raise DiceRangeError(f"sides must be at least 1, received {sides}")
        return sides, 1, sides

    def __setattr__(self, name: str, value: Any):
        if name in self.read_only_attributes:
            raise ReadOnlyAttributeError(type(self).__name__, name)
        super().__setattr__(name, value)

    # --- Read-only properties ---

    @property
    def notation(self) -> str:
        return self._notation

    @property
    def sides(self) -> Any:
        return self._sides

    @property
    def qty(self) -> int:
        return self._qty

    @property
    def min(self) -> int:
        return self._min

    @property
    def max(self) -> int:
        return self._max

    @property
    def name(self) -> str:
        return self.die_name

    @property
    def average(self) -> Union[int, float]:
        """The average value of a single die; an int when it is whole."""
        total = self.min + self.max
        return total // 2 if total % 2 == 0 else total / 2

    # --- Modifiers ---

    @property
    def modifiers(self) -> Optional[Dict[str, Modifier]]:
        return self._modifiers

    @modifiers.setter
    def modifiers(self, value: Any):
        modifiers = normalize_modifiers(value)
        for modifier in (modifiers or {}).values():
            modifier.validate(self)
        self._modifiers = modifiers

    # --- Rolling ---

    def roll_once(self) -> RollResult:
        """Rolls a single die."""
        return RollResult(value=generator.integer(self.min, self.max))

    def roll(self) -> RollResults:
        """
        Rolls `qty` dice and runs them through the modifiers.

        Returns:
            A new RollResults; its length can exceed `qty` if a modifier
            added extra rolls.
        """
        results = RollResults()
        for _ in range(self.qty):
            results.add_roll(self.roll_once())

        for key, modifier in (self.modifiers or {}).items():
            logger.debug(f"Applying modifier '{key}' (order {modifier.order}) to '{self.notation}'.")
            results = modifier.apply(results, self)

        logger.debug(f"Rolled '{self.notation}': {results} = {results.total}")
        return results

    # --- Output ---

    def to_json(self) -> Dict[str, Any]:
        return {
            "average": self.average,
            "max": self.max,
            "min": self.min,
            "modifiers": {key: m.to_json() for key, m in self.modifiers.items()} if self.modifiers else None,
            "name": self.name,
            "notation": self.notation,
            "qty": self.qty,
            "sides": self.sides,
            "type": "die",
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.notation!r})"

    def __str__(self) -> str:
        return self.notation


class FudgeDice(StandardDice):
    """
    Fate/Fudge dice, rolling -1, 0 or +1.

    `non_blanks` is how many faces of each sign the die has: 2 is the
    standard die (two each of -, blank, +), 1 is a die with one -, one +
    and four blanks.
    """

    die_name = "fudge"
    read_only_attributes = StandardDice.read_only_attributes + ("non_blanks",)

    def __init__(self, notation: str, non_blanks: Any = 2, qty: int = 1, modifiers: Any = None):
        super().__init__(notation, non_blanks, qty, modifiers)

    def _derive_bounds(self, sides):
        if sides is None or sides is False:
            sides = 2
        if not _is_integer(sides) or sides not in (1, 2):
            raise DiceRangeError(f"Non-blanks must be 1 or 2, received {sides!r}")
        self._non_blanks = sides
        return f"F.{sides}", -1, 1

    @property
    def non_blanks(self) -> int:
        return self._non_blanks

    def roll_once(self):
        if self.non_blanks == 2:
            # two of each face: 1d3 - 2
            value = generator.integer(1, 3) - 2
        else:
            # one of each non-blank on a d6: 1 = -1, 6 = +1, anything else blank
            number = generator.integer(1, 6)
            value = -1 if number == 1 else 1 if number == 6 else 0
        return RollResult(value=value)


class PercentileDice(StandardDice):
    """A d100, shown as `%` unless `sides_as_number` is set."""

    die_name = "percentile"
    read_only_attributes = StandardDice.read_only_attributes + ("sides_as_number",)

    def __init__(self, notation: str, qty: int = 1, modifiers: Any = None, sides_as_number: bool = False):
        self._sides_as_number = bool(sides_as_number)
        super().__init__(notation, 100, qty, modifiers)

    @property
    def sides_as_number(self) -> bool:
        return self._sides_as_number

    @property
    def sides(self):
        return self._sides if self.sides_as_number else "%"
