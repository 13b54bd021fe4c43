# rpg_dice/models.py
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ===================================================================
# Roll Result Models
# ===================================================================
# A RollResult is a single die outcome. Modifiers annotate it in place
# (flags, dropped state, overridden value) while the pipeline runs.

# Flag characters appended to a result's string form, in display order.
MODIFIER_FLAGS: Dict[str, str] = {
    "compound": "!!",
    "explode": "!",
    "penetrate": "p",
    "re-roll": "r",
    "re-roll-once": "ro",
    "unique": "u",
    "unique-once": "uo",
    "min": "^",
    "max": "v",
    "drop": "d",
    "target-success": "*",
    "target-failure": "_",
    "critical-success": "**",
    "critical-failure": "__",
}


class RollResult(BaseModel):
    """The outcome of rolling one die."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    value: int
    initial_value: Optional[int] = Field(None, alias="initialValue")
    calculation_value: Optional[int] = Field(None, alias="calculationValue")
    modifiers: Set[str] = Field(default_factory=set)
    use_in_total: bool = Field(True, alias="useInTotal")

    @model_validator(mode="after")
    def default_initial_value(self):
        # set via __dict__ so validate_assignment does not re-enter this validator
        if self.initial_value is None:
            self.__dict__["initial_value"] = self.value
        return self

    @property
    def effective_value(self) -> int:
        """The value counted towards totals."""
        if self.calculation_value is not None:
            return self.calculation_value
        return self.value

    @property
    def modifier_flags(self) -> str:
        # compound results are flagged "!!" rather than "!!!"
        flags = [
            flag for name, flag in MODIFIER_FLAGS.items()
            if name in self.modifiers and not (name == "explode" and "compound" in self.modifiers)
        ]
        return "".join(flags)

    def to_json(self) -> Dict[str, Any]:
        return {
            "calculationValue": self.effective_value,
            "initialValue": self.initial_value,
            "modifierFlags": self.modifier_flags,
            "modifiers": sorted(self.modifiers),
            "type": "result",
            "useInTotal": self.use_in_total,
            "value": self.value,
        }

    def __str__(self) -> str:
        return f"{self.value}{self.modifier_flags}"


class RollResults:
    """An ordered set of RollResult entries produced by one `roll()` call."""

    def __init__(self, rolls: Optional[Iterable[RollResult]] = None):
        self.rolls: List[RollResult] = list(rolls) if rolls else []

    def add_roll(self, roll: RollResult):
        if not isinstance(roll, RollResult):
            raise TypeError(f"roll must be a RollResult, received {type(roll).__name__}")
        self.rolls.append(roll)

    @property
    def total(self) -> int:
        """Sum of every result still counted towards the total."""
        return sum(roll.effective_value for roll in self.rolls if roll.use_in_total)

    @property
    def value(self) -> int:
        return self.total

    def to_json(self) -> List[Dict[str, Any]]:
        return [roll.to_json() for roll in self.rolls]

    def __len__(self) -> int:
        return len(self.rolls)

    def __iter__(self) -> Iterator[RollResult]:
        return iter(self.rolls)

    def __getitem__(self, index: int) -> RollResult:
        return self.rolls[index]

    def __str__(self) -> str:
        return f"[{', '.join(str(roll) for roll in self.rolls)}]"
