"""Multi-precision non-negative integers built from machine-word digits.

Provides the digit buffer representation and the arithmetic core the rest of the engine is built upon. Values are
stored as tuples of unsigned digits, least significant first, in base `2**DIGIT_BITS`. No trailing zero digits are
kept, except for the single digit that represents zero.

Typical usage example:

    x = Integer("31EB3579FFFFFFFFFFFFFFFFFFFFFFEC6FEBC427")
    q, r = divide(x, Integer(97))
    print(x.to_hex(), x.bit_length())
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import enum
import functools
import secrets
import string
from typing import Sequence

DIGIT_BITS: int = 32

_HEX_DIGITS = frozenset(string.hexdigits)


class UnderflowError(ArithmeticError):
    """Raised when a subtraction would produce a negative value."""


class Ordering(enum.IntEnum):
    """Result of comparing two Integers."""
    LT = -1
    EQ = 0
    GT = 1


def _trim(digits: list[int]) -> list[int]:
    """Drops leading zero digits in place, keeping at least one digit."""
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
    if not digits:
        digits.append(0)
    return digits


def _cmp_digits(a: Sequence[int], b: Sequence[int]) -> int:
    # Both operands are trimmed, so a longer buffer is always the greater value.
    if len(a) != len(b):
        return -1 if len(a) < len(b) else 1
    for x, y in zip(reversed(a), reversed(b)):
        if x != y:
            return -1 if x < y else 1
    return 0


def _add_digits(a: Sequence[int], b: Sequence[int], bits: int) -> list[int]:
    if len(a) < len(b):
        a, b = b, a
    mask = (1 << bits) - 1
    result = []
    carry = 0
    for i, x in enumerate(a):
        s = x + (b[i] if i < len(b) else 0) + carry
        result.append(s & mask)
        carry = s >> bits
    if carry:
        result.append(carry)
    return result


def _sub_digits(a: Sequence[int], b: Sequence[int], bits: int) -> list[int]:
    if _cmp_digits(a, b) < 0:
        raise UnderflowError("Subtraction result would be negative.")
    base = 1 << bits
    result = []
    borrow = 0
    for i, x in enumerate(a):
        d = x - (b[i] if i < len(b) else 0) - borrow
        if d < 0:
            d += base
            borrow = 1
        else:
            borrow = 0
        result.append(d)
    return _trim(result)


def _shl_digits(a: Sequence[int], count: int, bits: int) -> list[int]:
    whole, part = divmod(count, bits)
    result = [0] * whole
    if part == 0:
        result.extend(a)
        return _trim(result)
    mask = (1 << bits) - 1
    carry = 0
    for x in a:
        result.append(((x << part) & mask) | carry)
        carry = x >> (bits - part)
    result.append(carry)
    return _trim(result)


def _shr_digits(a: Sequence[int], count: int, bits: int) -> list[int]:
    whole, part = divmod(count, bits)
    if whole >= len(a):
        return [0]
    src = a[whole:]
    if part == 0:
        return _trim(list(src))
    mask = (1 << bits) - 1
    result = []
    for i, x in enumerate(src):
        hi = src[i + 1] if i + 1 < len(src) else 0
        result.append((x >> part) | ((hi << (bits - part)) & mask))
    return _trim(result)


def _mul_digits(a: Sequence[int], b: Sequence[int], bits: int, limit: int | None = None) -> list[int]:
    """Schoolbook multiplication, optionally computing only the lowest `limit` digits of the product."""
    width = len(a) + len(b)
    if limit is None or limit > width:
        limit = width
    mask = (1 << bits) - 1
    result = [0] * limit
    for i, x in enumerate(a):
        if i >= limit:
            break
        if x == 0:
            continue
        carry = 0
        for j, y in enumerate(b):
            if i + j >= limit:
                carry = 0
                break
            # (B-1)**2 + 2*(B-1) < B**2, so the accumulator never exceeds two digits.
            t = result[i + j] + x * y + carry
            result[i + j] = t & mask
            carry = t >> bits
        if carry and i + len(b) < limit:
            result[i + len(b)] = carry
    return _trim(result)


def _divmod_single(a: Sequence[int], d: int, bits: int) -> tuple[list[int], int]:
    quotient = [0] * len(a)
    rem = 0
    for i in reversed(range(len(a))):
        quotient[i], rem = divmod((rem << bits) | a[i], d)
    return _trim(quotient), rem


def _divmod_digits(a: Sequence[int], b: Sequence[int], bits: int) -> tuple[list[int], list[int]]:
    """Long division by estimating each quotient digit from the leading digits and correcting it.

    The divisor is normalised so that its top digit has the high bit set, which bounds every estimate to at most two
    too large. Follows Knuth, TAOCP Vol. 2, Algorithm 4.3.1 D.
    """
    if len(b) == 1 and b[0] == 0:
        raise ZeroDivisionError("Integer division or modulo by zero.")
    if _cmp_digits(a, b) < 0:
        return [0], list(a)
    if len(b) == 1:
        q, r = _divmod_single(a, b[0], bits)
        return q, [r]
    base = 1 << bits
    mask = base - 1
    shift = bits - b[-1].bit_length()
    v = _shl_digits(b, shift, bits)
    u = _shl_digits(a, shift, bits)
    if len(u) == len(a):
        u.append(0)
    n = len(v)
    m = len(a) - n
    quotient = [0] * (m + 1)
    for j in range(m, -1, -1):
        qhat, rhat = divmod((u[j + n] << bits) | u[j + n - 1], v[n - 1])
        while qhat >= base or qhat * v[n - 2] > ((rhat << bits) | u[j + n - 2]):
            qhat -= 1
            rhat += v[n - 1]
            if rhat >= base:
                break
        borrow = 0
        carry = 0
        for i in range(n):
            p = qhat * v[i] + carry
            carry = p >> bits
            t = u[i + j] - (p & mask) - borrow
            borrow = 1 if t < 0 else 0
            u[i + j] = t & mask
        t = u[j + n] - carry - borrow
        u[j + n] = t & mask
        if t < 0:
            # Estimate was one too large, add the divisor back.
            qhat -= 1
            carry = 0
            for i in range(n):
                t = u[i + j] + v[i] + carry
                u[i + j] = t & mask
                carry = t >> bits
            u[j + n] = (u[j + n] + carry) & mask
        quotient[j] = qhat
    remainder = _shr_digits(_trim(u[:n]), shift, bits)
    return _trim(quotient), remainder


@functools.total_ordering
class Integer:
    """An immutable arbitrary-precision non-negative integer.

    The digit width is a class level setting. The default class uses `DIGIT_BITS` wide digits, a different width is
    selected by subclassing with the `digit_bits` keyword, e.g. `class Integer16(Integer, digit_bits=16)`. Operands of
    different widths cannot be mixed in arithmetic or ordering, but compare equal by value. Plain `int` operands are
    converted on the fly.

    Attributes:
        DIGIT_BITS: Bits per digit.
        BASE: The digit radix, `2**DIGIT_BITS`.
        MASK: `BASE - 1`.
        WORD_BYTES: Bytes per digit, used for packing.
    """

    __slots__ = ("_digits",)

    DIGIT_BITS: int
    BASE: int
    MASK: int
    WORD_BYTES: int

    def __init_subclass__(cls, digit_bits: int | None = None, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if digit_bits is not None:
            cls._set_radix(digit_bits)

    @classmethod
    def _set_radix(cls, bits: int) -> None:
        if bits <= 0 or bits % 8 != 0:
            raise ValueError("Digit width must be a positive multiple of 8 bits.")
        cls.DIGIT_BITS = bits
        cls.BASE = 1 << bits
        cls.MASK = cls.BASE - 1
        cls.WORD_BYTES = bits // 8

    def __init__(self, value: "int | str | Integer" = 0) -> None:
        """Builds an Integer from an int, a big-endian hexadecimal string or another Integer.

        Args:
            value: Non-negative int, hex string (optionally `0x` prefixed, any case) or an Integer of the same width.

        Raises:
            ValueError: If the value is negative or the string is not valid hexadecimal.
            TypeError: If the value has an unsupported type or a different digit width.
        """
        if isinstance(value, Integer):
            if value.DIGIT_BITS != self.DIGIT_BITS:
                raise TypeError("Cannot mix Integers of different digit widths.")
            self._digits = value._digits
        elif isinstance(value, str):
            self._digits = tuple(self._parse_hex(value))
        elif isinstance(value, int) and not isinstance(value, bool):
            if value < 0:
                raise ValueError("Integer only represents non-negative values.")
            digits = []
            while value:
                digits.append(value & self.MASK)
                value >>= self.DIGIT_BITS
            self._digits = tuple(_trim(digits))
        else:
            raise TypeError(f"Cannot build an Integer from {type(value).__name__}.")

    @classmethod
    def _parse_hex(cls, text: str) -> list[int]:
        if text[:2] in ("0x", "0X"):
            text = text[2:]
        if not text or not _HEX_DIGITS.issuperset(text):
            raise ValueError(f"Invalid hexadecimal literal: {text!r}")
        width = cls.DIGIT_BITS // 4
        digits = []
        for end in range(len(text), 0, -width):
            digits.append(int(text[max(0, end - width):end], 16))
        return _trim(digits)

    @classmethod
    def from_digits(cls, digits: Sequence[int]) -> "Integer":
        """Builds an Integer from raw digits, least significant first.

        Raises:
            ValueError: If any digit is outside `[0, BASE)`.
        """
        if any(not 0 <= d < cls.BASE for d in digits):
            raise ValueError("Digit out of range for the digit width.")
        return cls._wrap(list(digits))

    @classmethod
    def _wrap(cls, digits: list[int]) -> "Integer":
        obj = object.__new__(cls)
        obj._digits = tuple(_trim(digits))
        return obj

    @classmethod
    def from_bytes(cls, data: bytes) -> "Integer":
        """Builds an Integer from little-endian words, each word stored least significant byte first.

        Args:
            data: The raw bytes. Length must be a multiple of `WORD_BYTES`.

        Returns:
            The Integer whose digit `i` is the `i`-th word of `data`.

        Raises:
            ValueError: If the length is not a multiple of the word size.
        """
        if len(data) % cls.WORD_BYTES:
            raise ValueError(f"Byte length must be a multiple of {cls.WORD_BYTES}.")
        return cls._wrap([
            int.from_bytes(data[i:i + cls.WORD_BYTES], byteorder="little")
            for i in range(0, len(data), cls.WORD_BYTES)
        ] or [0])

    def to_bytes(self, digits: int) -> bytes:
        """Unpacks the Integer into exactly `digits` little-endian words.

        Raises:
            OverflowError: If the value needs more than `digits` digits.
        """
        if self.digit_length() > digits and self:
            raise OverflowError("Integer too large to unpack into the requested number of digits.")
        padded = list(self._digits) + [0] * (digits - len(self._digits))
        return b"".join(d.to_bytes(self.WORD_BYTES, byteorder="little") for d in padded[:digits])

    @classmethod
    def random_bits(cls, bits: int) -> "Integer":
        """Uniformly random Integer in `[0, 2**bits)`, drawn one digit at a time."""
        whole, part = divmod(bits, cls.DIGIT_BITS)
        digits = [secrets.randbits(cls.DIGIT_BITS) for _ in range(whole)]
        if part:
            digits.append(secrets.randbits(part))
        return cls._wrap(digits)

    @classmethod
    def random_range(cls, minimum: "Integer | int", maximum: "Integer | int") -> "Integer":
        """Uniformly random Integer in `[minimum, maximum)` by rejection sampling.

        Raises:
            ValueError: If the range is empty.
        """
        minimum, maximum = cls(minimum), cls(maximum)
        if minimum >= maximum:
            raise ValueError("Random range is empty.")
        span = maximum - minimum
        nbits = span.bit_length()
        while True:
            candidate = cls.random_bits(nbits)
            if candidate < span:
                return minimum + candidate

    @property
    def digits(self) -> tuple[int, ...]:
        """The digits, least significant first."""
        return self._digits

    def digit_length(self) -> int:
        """Number of stored digits, at least one."""
        return len(self._digits)

    def bit_length(self) -> int:
        """Position of the highest set bit plus one, zero for zero."""
        if not self:
            return 0
        return (len(self._digits) - 1) * self.DIGIT_BITS + self._digits[-1].bit_length()

    def test_bit(self, index: int) -> bool:
        """Whether bit `index` is set. Bits past the top digit read as zero.

        Args:
            index: Bit position, 0 being the least significant.

        Returns:
            True if the bit is set.
        """
        whole, part = divmod(index, self.DIGIT_BITS)
        if whole >= len(self._digits):
            return False
        return bool((self._digits[whole] >> part) & 1)

    def low_digits(self, count: int) -> "Integer":
        """The value modulo `BASE**count`."""
        return self._wrap(list(self._digits[:count]))

    def to_hex(self) -> str:
        """Uppercase hexadecimal, most significant digit first. Diagnostic rendering only."""
        width = self.DIGIT_BITS // 4
        top, *rest = reversed(self._digits)
        return f"{top:X}" + "".join(f"{d:0{width}X}" for d in rest)

    def _coerce(self, other) -> "Integer":
        if isinstance(other, Integer):
            if other.DIGIT_BITS != self.DIGIT_BITS:
                raise TypeError("Cannot mix Integers of different digit widths.")
            return other
        if isinstance(other, int) and not isinstance(other, bool):
            return type(self)(other)
        return NotImplemented

    def __add__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        return add(self, other)

    __radd__ = __add__

    def __sub__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        return subtract(self, other)

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        return subtract(other, self)

    def __mul__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        return multiply(self, other)

    __rmul__ = __mul__

    def __divmod__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        return divide(self, other)

    def __rdivmod__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        return divide(other, self)

    def __floordiv__(self, other):
        result = self.__divmod__(other)
        return result if result is NotImplemented else result[0]

    def __mod__(self, other):
        result = self.__divmod__(other)
        return result if result is NotImplemented else result[1]

    def __rfloordiv__(self, other):
        result = self.__rdivmod__(other)
        return result if result is NotImplemented else result[0]

    def __rmod__(self, other):
        result = self.__rdivmod__(other)
        return result if result is NotImplemented else result[1]

    def __lshift__(self, count: int) -> "Integer":
        return shift_left(self, count)

    def __rshift__(self, count: int) -> "Integer":
        return shift_right(self, count)

    def __and__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        return self._wrap([x & y for x, y in zip(self._digits, other._digits)])

    __rand__ = __and__

    def __or__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        a, b = self._digits, other._digits
        if len(a) < len(b):
            a, b = b, a
        return self._wrap([x | (b[i] if i < len(b) else 0) for i, x in enumerate(a)])

    __ror__ = __or__

    def __eq__(self, other) -> bool:
        # Equality is by value across digit widths, matching the int based hash.
        if isinstance(other, Integer) and other.DIGIT_BITS != self.DIGIT_BITS:
            return int(self) == int(other)
        try:
            other = self._coerce(other)
        except ValueError:
            return False
        if other is NotImplemented:
            return other
        return self._digits == other._digits

    def __lt__(self, other) -> bool:
        other = self._coerce(other)
        if other is NotImplemented:
            return other
        return compare(self, other) is Ordering.LT

    def __hash__(self) -> int:
        return hash(int(self))

    def __bool__(self) -> bool:
        return self._digits != (0,)

    def __int__(self) -> int:
        value = 0
        for d in reversed(self._digits):
            value = (value << self.DIGIT_BITS) | d
        return value

    def __str__(self) -> str:
        return self.to_hex()

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.to_hex()}')"


Integer._set_radix(DIGIT_BITS)


def _check_widths(a: Integer, b: Integer) -> int:
    if a.DIGIT_BITS != b.DIGIT_BITS:
        raise TypeError("Cannot mix Integers of different digit widths.")
    return a.DIGIT_BITS


def add(a: Integer, b: Integer) -> Integer:
    """Returns `a + b`, adding digit by digit with carry propagation."""
    return a._wrap(_add_digits(a.digits, b.digits, _check_widths(a, b)))


def subtract(a: Integer, b: Integer) -> Integer:
    """Returns `a - b`.

    Raises:
        UnderflowError: If `a < b`. Values are unsigned, so wrapping around is never an option.
    """
    return a._wrap(_sub_digits(a.digits, b.digits, _check_widths(a, b)))


def compare(a: Integer, b: Integer) -> Ordering:
    """Compares two Integers from the most significant digit downwards."""
    _check_widths(a, b)
    return Ordering(_cmp_digits(a.digits, b.digits))


def shift_left(a: Integer, count: int) -> Integer:
    """Returns `a * 2**count`, as whole-digit moves plus an intra-digit shift.

    Raises:
        ValueError: If `count` is negative.
    """
    if count < 0:
        raise ValueError("Negative shift count.")
    return a._wrap(_shl_digits(a.digits, count, a.DIGIT_BITS))


def shift_right(a: Integer, count: int) -> Integer:
    """Returns `a // 2**count`. Shifting past the bit length yields zero.

    Raises:
        ValueError: If `count` is negative.
    """
    if count < 0:
        raise ValueError("Negative shift count.")
    return a._wrap(_shr_digits(a.digits, count, a.DIGIT_BITS))


def multiply(a: Integer, b: Integer, low_digits: int | None = None) -> Integer:
    """Schoolbook multiplication.

    Args:
        a: Multiplicand.
        b: Multiplier.
        low_digits: If given, only the product modulo `BASE**low_digits` is computed.

    Returns:
        `a * b`, or its lowest `low_digits` digits.
    """
    return a._wrap(_mul_digits(a.digits, b.digits, _check_widths(a, b), low_digits))


def divide(a: Integer, b: Integer) -> tuple[Integer, Integer]:
    """Long division of `a` by `b`.

    Returns:
        `(quotient, remainder)` with `a == quotient * b + remainder` and `0 <= remainder < b`.

    Raises:
        ZeroDivisionError: If `b` is zero.
    """
    q, r = _divmod_digits(a.digits, b.digits, _check_widths(a, b))
    return a._wrap(q), a._wrap(r)
