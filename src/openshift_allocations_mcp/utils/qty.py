import math
import re
from enum import Enum
from fractions import Fraction
from functools import total_ordering


class QuantityParseError(ValueError):
    """Raised when a string is not a valid Kubernetes quantity."""

    def __init__(self, text: str):
        super().__init__(f"Invalid quantity: {text!r}")
        self.text = text


class Family(Enum):
    """Scale family a quantity was written in."""
    UNSCALED = "unscaled"
    DECIMAL = "decimal"
    BINARY = "binary"


# Decimal suffixes are powers of ten, binary suffixes powers of 1024.
DECIMAL_SUFFIXES = {"m": -3, "k": 3, "M": 6, "G": 9, "T": 12, "P": 15, "E": 18}
BINARY_SUFFIXES = {"Ki": 1, "Mi": 2, "Gi": 3, "Ti": 4, "Pi": 5, "Ei": 6}

# Largest first, used by rescale_for_display
DECIMAL_SCALES = [("E", 18), ("P", 15), ("T", 12), ("G", 9), ("M", 6), ("k", 3), ("", 0), ("m", -3)]
BINARY_SCALES = [("Ei", 6), ("Pi", 5), ("Ti", 4), ("Gi", 3), ("Mi", 2), ("Ki", 1), ("", 0)]

_QUANTITY_RE = re.compile(
    r"(?P<sign>[+-])?(?P<whole>[0-9]+)(?:\.(?P<frac>[0-9]+))?"
    r"(?:[eE](?P<exp>[+-]?[0-9]+))?"
    r"(?P<suffix>m|k|M|G|T|P|E|Ki|Mi|Gi|Ti|Pi|Ei)?"
)


def _normalize(mantissa: int, exponent: int) -> tuple[int, int]:
    """Strip trailing decimal zeros so equal values share one representation."""
    if mantissa == 0:
        return 0, 0
    while mantissa % 10 == 0:
        mantissa //= 10
        exponent += 1
    return mantissa, exponent


@total_ordering
class Qty:
    """
    Exact Kubernetes quantity.

    The value is ``mantissa * 10**exponent`` with an arbitrary precision
    integer mantissa. Binary suffixes are folded into the mantissa as exact
    multiples of 1024, so values written with different suffixes add and
    compare without any rounding. The family and the largest suffix scale
    seen are only kept to pick display suffixes; sums keep the family of
    their largest suffix, whatever order the operands come in.

    ``Qty()`` is zero, the identity for addition.
    """

    __slots__ = ("_mantissa", "_exponent", "_family", "_scale")

    def __init__(
        self,
        mantissa: int = 0,
        exponent: int = 0,
        family: Family = Family.UNSCALED,
        scale: Fraction = Fraction(0),
    ):
        self._mantissa, self._exponent = _normalize(mantissa, exponent)
        self._family = family
        # factor of the largest suffix written, 0 for a bare Qty()
        self._scale = Fraction(scale)

    @classmethod
    def zero(cls) -> "Qty":
        return cls()

    @classmethod
    def parse(cls, text: str) -> "Qty":
        """
        Parse a quantity string such as ``500m``, ``1.5Gi`` or ``2e3``.

        Args:
            text: Quantity in Kubernetes notation

        Returns:
            The exact quantity

        Raises:
            QuantityParseError: If the text does not match the quantity grammar
        """
        match = _QUANTITY_RE.fullmatch(str(text).strip())
        if match is None:
            raise QuantityParseError(text)

        frac = match.group("frac") or ""
        mantissa = int(match.group("whole") + frac)
        exponent = int(match.group("exp") or 0) - len(frac)

        suffix = match.group("suffix")
        if suffix in BINARY_SUFFIXES:
            scale = Fraction(1024) ** BINARY_SUFFIXES[suffix]
            mantissa *= int(scale)
            family = Family.BINARY
        elif suffix:
            scale = Fraction(10) ** DECIMAL_SUFFIXES[suffix]
            exponent += DECIMAL_SUFFIXES[suffix]
            family = Family.DECIMAL
        else:
            scale = Fraction(1)
            family = Family.UNSCALED

        if match.group("sign") == "-":
            mantissa = -mantissa
        return cls(mantissa, exponent, family, scale)

    @property
    def mantissa(self) -> int:
        return self._mantissa

    @property
    def exponent(self) -> int:
        return self._exponent

    @property
    def family(self) -> Family:
        return self._family

    def to_fraction(self) -> Fraction:
        return Fraction(self._mantissa) * Fraction(10) ** self._exponent

    def _aligned(self, other: "Qty") -> tuple[int, int, int]:
        exponent = min(self._exponent, other._exponent)
        return (
            self._mantissa * 10 ** (self._exponent - exponent),
            other._mantissa * 10 ** (other._exponent - exponent),
            exponent,
        )

    def _dominant(self, other: "Qty") -> "Qty":
        # max() over suffix scales is commutative and associative
        return self if self._scale >= other._scale else other

    def __add__(self, other):
        if not isinstance(other, Qty):
            # lets sum() start from the int 0
            if other == 0:
                return self
            return NotImplemented
        a, b, exponent = self._aligned(other)
        dominant = self._dominant(other)
        return Qty(a + b, exponent, dominant._family, dominant._scale)

    __radd__ = __add__

    def __sub__(self, other):
        if not isinstance(other, Qty):
            return NotImplemented
        a, b, exponent = self._aligned(other)
        dominant = self._dominant(other)
        return Qty(a - b, exponent, dominant._family, dominant._scale)

    def __neg__(self) -> "Qty":
        return Qty(-self._mantissa, self._exponent, self._family, self._scale)

    def __abs__(self) -> "Qty":
        return Qty(abs(self._mantissa), self._exponent, self._family, self._scale)

    def __bool__(self) -> bool:
        return self._mantissa != 0

    def __eq__(self, other):
        if not isinstance(other, Qty):
            return NotImplemented
        return self._mantissa == other._mantissa and self._exponent == other._exponent

    def __lt__(self, other):
        if not isinstance(other, Qty):
            return NotImplemented
        a, b, _ = self._aligned(other)
        return a < b

    def __hash__(self):
        return hash((self._mantissa, self._exponent))

    def percentage_of(self, denominator: "Qty") -> float:
        """Return ``100 * self / denominator``, or 0 when the denominator is zero."""
        if not denominator:
            return 0.0
        return float(100 * self.to_fraction() / denominator.to_fraction())

    def rescale_for_display(self) -> str:
        """
        Render the quantity with the suffix that keeps one to three leading digits.

        Suffixes come from the quantity's own family (unscaled values use the
        decimal suffixes). The scaled value is rounded half up to one decimal
        for display, and a trailing ``.0`` is dropped. When rounding carries
        into a fourth digit the next larger suffix is used. Values that round
        to nothing even at the smallest suffix render as ``0``.
        """
        if not self:
            return "0"

        if self._family == Family.BINARY:
            base = 1024
            scales = [(label, Fraction(1024) ** power) for label, power in BINARY_SCALES]
        else:
            base = 1000
            scales = [(label, Fraction(10) ** power) for label, power in DECIMAL_SCALES]

        magnitude = abs(self.to_fraction())
        index = len(scales) - 1
        for candidate_index, (_, candidate_factor) in enumerate(scales):
            if magnitude >= candidate_factor:
                index = candidate_index
                break

        while True:
            label, factor = scales[index]
            tenths = math.floor(magnitude / factor * 10 + Fraction(1, 2))
            if tenths < base * 10 or index == 0:
                break
            index -= 1

        if tenths == 0:
            return "0"
        whole, decimal = divmod(tenths, 10)
        sign = "-" if self._mantissa < 0 else ""
        digits = f"{whole}.{decimal}" if decimal else f"{whole}"
        return f"{sign}{digits}{label}"

    def __str__(self):
        return self.rescale_for_display()

    def __repr__(self):
        return f"Qty(mantissa={self._mantissa}, exponent={self._exponent}, family={self._family.value})"


def parse_quantity(text: str) -> Qty:
    """Parse a Kubernetes quantity string. See ``Qty.parse``."""
    return Qty.parse(text)


def compare(a: Qty, b: Qty) -> int:
    """Return -1, 0 or 1 as ``a`` is smaller than, equal to or larger than ``b``."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def percentage_of(numerator: Qty, denominator: Qty) -> float:
    return numerator.percentage_of(denominator)
