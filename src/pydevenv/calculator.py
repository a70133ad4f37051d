"""Basic arithmetic operations.

The sample module that the lint, format, type-check and test chapters run
their tools against.
"""

from __future__ import annotations

from collections.abc import Callable

Number = int | float


def add(a: Number, b: Number) -> Number:
    """Return the sum of two numbers."""
    return a + b


def subtract(a: Number, b: Number) -> Number:
    """Return the difference of two numbers."""
    return a - b


def multiply(a: Number, b: Number) -> Number:
    """Return the product of two numbers."""
    return a * b


def divide(a: Number, b: Number) -> float:
    """Divide *a* by *b*.

    Raises:
        ValueError: If *b* is zero.
    """
    if b == 0:
        msg = "Cannot divide by zero"
        raise ValueError(msg)
    return a / b


def power(base: Number, exponent: Number) -> Number:
    """Raise *base* to *exponent*.

    Raises:
        ValueError: If a negative *base* is raised to a fractional *exponent*,
            which has no real result.
        ZeroDivisionError: If zero is raised to a negative *exponent*.
    """
    if base < 0 and not float(exponent).is_integer():
        msg = "Cannot raise a negative number to a fractional power"
        raise ValueError(msg)
    return base**exponent


OPERATIONS: dict[str, Callable[[Number, Number], Number]] = {
    "add": add,
    "subtract": subtract,
    "multiply": multiply,
    "divide": divide,
    "power": power,
}
