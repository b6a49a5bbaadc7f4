"""Exact balance arithmetic in raw units.

A balance is a non-negative integer number of *raw*, the smallest unit of
the ledger. Wallets display balances in whole units of ``10**30`` raw.
All arithmetic happens on the raw integer, so no precision is ever lost
regardless of magnitude.
"""

from __future__ import annotations

import locale
import re
from decimal import Decimal
from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator

_RAW_EXPONENT = 30

#: Raw units per display unit.
RAW_PER_UNIT = 10**_RAW_EXPONENT

#: Maximum fractional digits shown by :meth:`Amount.to_display_string`.
DISPLAY_PRECISION = 5

#: Width of the balance field in a state block preimage.
BALANCE_BYTES = 16

_RAW_RE = re.compile(r"^[0-9]+$")

Number = Union[int, float, str, Decimal]


class Amount(BaseModel):
    """A non-negative balance held in raw units.

    Construct with :meth:`from_raw` or :meth:`from_display`. Amounts are
    immutable, hashable and totally ordered by their raw value.

    Example::

        Amount.from_display("1.8").to_raw_string()
        # '1800000000000000000000000000000'
    """

    model_config = ConfigDict(frozen=True)

    raw: Annotated[int, Field(ge=0, description="Value in raw units")]

    @model_validator(mode="before")
    @classmethod
    def _coerce_raw(cls, data: Any) -> Any:
        # Accept the wire form (a decimal string) and plain ints.
        if isinstance(data, (str, int)) and not isinstance(data, bool):
            return {"raw": cls.from_raw(data).raw}
        return data

    # ----- constructors ----------------------------------------------------

    @classmethod
    def from_raw(cls, value: str | int) -> "Amount":
        """Parse a raw decimal numeral.

        Parsing is lenient: anything that is not an unsigned base-10
        integer (signs, fractions, separators, empty input) yields zero.
        Do not use this for validating user input.
        """
        if isinstance(value, bool):
            return cls(raw=0)
        if isinstance(value, int):
            return cls(raw=value if value >= 0 else 0)
        text = str(value).strip()
        if not _RAW_RE.match(text):
            return cls(raw=0)
        return cls(raw=int(text))

    @classmethod
    def from_display(cls, value: Number) -> "Amount":
        """Convert a display-unit value to raw units.

        Floats go through their shortest ``repr`` so that ``1.8`` means
        exactly 1.8. Digits beyond raw precision are truncated.

        Raises:
            ValueError: If *value* is negative or not a number.
        """
        try:
            units = Decimal(str(value))
        except ArithmeticError as exc:
            raise ValueError(f"not a number: {value!r}") from exc
        if not units.is_finite() or units < 0:
            raise ValueError(f"amount must be a finite non-negative number, got {value!r}")
        _, digits, exponent = units.as_tuple()
        coefficient = int("".join(map(str, digits)))
        shift = exponent + _RAW_EXPONENT
        if shift >= 0:
            return cls(raw=coefficient * 10**shift)
        if -shift > len(digits):
            return cls(raw=0)
        return cls(raw=coefficient // 10**-shift)

    @classmethod
    def zero(cls) -> "Amount":
        return cls(raw=0)

    # ----- conversions -----------------------------------------------------

    def to_raw_string(self) -> str:
        """Exact raw value, no grouping, no exponent."""
        return str(self.raw)

    def to_display(self) -> Decimal:
        """Exact value in display units."""
        return Decimal(f"{self.raw}E-30")

    def to_display_string(self, decimal_point: str | None = None) -> str:
        """Display value rounded half-up to :data:`DISPLAY_PRECISION` digits.

        Trailing fractional zeros are dropped. The decimal separator comes
        from the current locale unless *decimal_point* is given.
        """
        step = 10 ** (_RAW_EXPONENT - DISPLAY_PRECISION)
        units, remainder = divmod(self.raw, step)
        if 2 * remainder >= step:
            units += 1
        whole, fraction = divmod(units, 10**DISPLAY_PRECISION)
        fraction_digits = f"{fraction:0{DISPLAY_PRECISION}d}".rstrip("0")
        if not fraction_digits:
            return str(whole)
        if decimal_point is None:
            decimal_point = locale.localeconv()["decimal_point"] or "."
        return f"{whole}{decimal_point}{fraction_digits}"

    def to_raw_bytes(self) -> bytes:
        """Minimal big-endian encoding of the raw value; zero is ``b""``."""
        return self.raw.to_bytes((self.raw.bit_length() + 7) // 8, "big")

    # ----- arithmetic ------------------------------------------------------

    @staticmethod
    def _raw_of(other: Any) -> int | None:
        if isinstance(other, Amount):
            return other.raw
        if isinstance(other, int) and not isinstance(other, bool):
            return other
        return None

    def __add__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(raw=self.raw + other.raw)

    def __sub__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        if other.raw > self.raw:
            raise ValueError(
                f"subtraction would make the amount negative ({self.raw} - {other.raw})"
            )
        return Amount(raw=self.raw - other.raw)

    def __mul__(self, other: "Amount | int") -> "Amount":
        raw = self._raw_of(other)
        if raw is None:
            return NotImplemented
        return Amount(raw=self.raw * raw)

    __rmul__ = __mul__

    def __floordiv__(self, other: "Amount | int") -> "Amount":
        raw = self._raw_of(other)
        if raw is None:
            return NotImplemented
        if raw == 0:
            raise ZeroDivisionError("division of an amount by zero")
        return Amount(raw=self.raw // raw)

    # Raw units are indivisible, so true division truncates as well.
    __truediv__ = __floordiv__

    # ----- ordering --------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Amount):
            return NotImplemented
        return self.raw == other.raw

    def __hash__(self) -> int:
        return hash(self.raw)

    def __lt__(self, other: "Amount") -> bool:
        if not isinstance(other, Amount):
            return NotImplemented
        return self.raw < other.raw

    def __le__(self, other: "Amount") -> bool:
        if not isinstance(other, Amount):
            return NotImplemented
        return self.raw <= other.raw

    def __gt__(self, other: "Amount") -> bool:
        if not isinstance(other, Amount):
            return NotImplemented
        return self.raw > other.raw

    def __ge__(self, other: "Amount") -> bool:
        if not isinstance(other, Amount):
            return NotImplemented
        return self.raw >= other.raw

    def __bool__(self) -> bool:
        return self.raw != 0

    def __str__(self) -> str:
        return self.to_raw_string()

    # The node sends and expects balances as decimal strings.
    @model_serializer(mode="plain")
    def _serialize(self) -> str:
        return self.to_raw_string()
