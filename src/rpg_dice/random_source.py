# rpg_dice/random_source.py
import random
from typing import Optional

from .config import settings
from .exceptions import DiceRangeError
from .logger import logger


class NumberGenerator:
    """
    Supplies uniformly distributed integers to the dice.

    The actual randomness comes from `engine`, which can be any object that
    provides `randint(a, b)`. By default this is a private `random.Random`
    so seeding one generator does not affect the global `random` module.
    """

    def __init__(self, seed: Optional[int] = None):
        self.engine = random.Random(seed)

    def seed(self, seed: Optional[int] = None):
        """Re-seed the engine, or reset it to a fresh `random.Random`."""
        if not isinstance(self.engine, random.Random):
            logger.debug("Replacing custom number engine with random.Random for seeding.")
            self.engine = random.Random()
        self.engine.seed(seed)

    def integer(self, min: int, max: int) -> int:
        """
        Returns a random integer between `min` and `max`, both inclusive.

        Raises:
            DiceRangeError: If `min` is greater than `max`.
        """
        if min > max:
            raise DiceRangeError(f"min ({min}) must not be greater than max ({max})")
        return self.engine.randint(min, max)


# Shared instance used by every die
generator = NumberGenerator(settings.seed)
