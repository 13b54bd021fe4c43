# rpg_dice/exceptions.py

# ===================================================================
# Exceptions
# ===================================================================
# Each error also derives from the builtin that describes its category,
# so callers can catch either the package error or the builtin.


class DiceError(Exception):
    """Base exception for dice errors."""
    pass


class RequiredArgumentError(DiceError, ValueError):
    """Raised when a required argument is missing or empty."""

    def __init__(self, argument_name: str = ""):
        self.argument_name = argument_name
        message = f"Missing argument: {argument_name}" if argument_name else "Missing argument"
        super().__init__(message)


class DiceRangeError(DiceError, ValueError):
    """Raised when a value falls outside the range a die or modifier accepts."""
    pass


class ReadOnlyAttributeError(DiceError, TypeError):
    """Raised when assigning to an attribute that is fixed at construction."""

    def __init__(self, owner: str, attribute: str):
        self.owner = owner
        self.attribute = attribute
        super().__init__(f"'{owner}.{attribute}' is read-only")


class DieActionValueError(DiceError, ValueError):
    """Raised when a die cannot perform the action a modifier asks for."""

    def __init__(self, die, action: str = ""):
        self.die = die
        self.action = action
        super().__init__(f"Die '{die}' must have more than 1 possible value to {action or 'do this action'}")


class CompareOperatorError(DiceError, ValueError):
    """Raised when a compare point is given an unknown operator."""

    def __init__(self, operator):
        self.operator = operator
        super().__init__(f"Operator '{operator}' is invalid")
