from dataclasses import dataclass
from decimal import Context, Decimal, Inexact, InvalidOperation, ROUND_DOWN
from typing import Union

MIN_PRECISION = 48
# Wire amounts are bounded so that exact arithmetic stays cheap.
MAX_INTEGER_DIGITS = 28
MAX_FRACTION_DIGITS = 128

OUTPUT_PLACES = 4
_OUTPUT_QUANTUM = Decimal(1).scaleb(-OUTPUT_PLACES)


def _exact_context(*values: Decimal) -> Context:
    """Context wide enough that adding or subtracting values never rounds."""
    top = max(value.adjusted() for value in values)
    bottom = min(min(value.as_tuple().exponent, 0) for value in values)
    return Context(prec=max(MIN_PRECISION, top - bottom + 2), traps=[Inexact, InvalidOperation])


@dataclass(frozen=True, order=True)
class Money:
    """
    Signed fixed-precision amount backed by Decimal.
    Arithmetic is exact; the only lossy step is truncate(), used for output.
    """

    value: Decimal = Decimal(0)

    ZERO = None  # set below, after the class exists

    def __post_init__(self):
        if isinstance(self.value, (float, bool)):
            raise TypeError(f"Money does not accept {type(self.value).__name__} values")
        if isinstance(self.value, int):
            object.__setattr__(self, "value", Decimal(self.value))
        elif not isinstance(self.value, Decimal):
            raise TypeError(f"Money expects a Decimal, got {type(self.value).__name__}")
        if not self.value.is_finite():
            raise ValueError(f"Money must be finite, got {self.value}")

    @classmethod
    def parse(cls, text: str) -> "Money":
        """Parse a decimal amount such as '1.5' or '-0.0001'."""
        stripped = text.strip()
        if not stripped:
            raise ValueError("empty amount")
        try:
            value = Decimal(stripped)
        except InvalidOperation:
            raise ValueError(f"malformed amount {text!r}") from None
        if not value.is_finite():
            raise ValueError(f"non-finite amount {text!r}")
        if not value.is_zero() and value.adjusted() >= MAX_INTEGER_DIGITS:
            raise ValueError(f"amount {text!r} exceeds {MAX_INTEGER_DIGITS} integer digits")
        if value.as_tuple().exponent < -MAX_FRACTION_DIGITS:
            raise ValueError(f"amount {text!r} has more than {MAX_FRACTION_DIGITS} fractional digits")
        return cls(value)

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(_exact_context(self.value, other.value).add(self.value, other.value))

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(_exact_context(self.value, other.value).subtract(self.value, other.value))

    def __neg__(self) -> "Money":
        return Money(self.value.copy_negate())

    def is_zero(self) -> bool:
        return self.value.is_zero()

    def is_positive(self) -> bool:
        return self.value > 0

    def is_negative(self) -> bool:
        return self.value < 0

    def truncate(self) -> "Money":
        """Drop digits beyond four decimal places, rounding toward zero."""
        context = Context(prec=max(MIN_PRECISION, self.value.adjusted() + OUTPUT_PLACES + 2), traps=[InvalidOperation])
        return Money(self.value.quantize(_OUTPUT_QUANTUM, rounding=ROUND_DOWN, context=context))

    def __str__(self) -> str:
        return f"{self.value:f}"

    def __repr__(self) -> str:
        return f"Money('{self.value}')"


Money.ZERO = Money(Decimal(0))


def to_money(amount: Union[Money, Decimal, int, str]) -> Money:
    """Coerce a Decimal, int or decimal string into Money."""
    if isinstance(amount, Money):
        return amount
    if isinstance(amount, str):
        return Money.parse(amount)
    return Money(amount)
