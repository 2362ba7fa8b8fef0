"""Barrett reduction and square-and-multiply modular exponentiation.

A `BarrettReducer` is bound to one modulus for its whole lifetime. It precomputes `mu = BASE**(2k) // n` with a single
long division so that every later "mod n" only costs a couple of multiplications. The reducer never changes after
construction and may be shared read-only between threads.

Typical usage example:

    reducer = BarrettReducer(Integer(2773))
    c = power(Integer(7), Integer(13), reducer)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from mprsa.integer import divide
from mprsa.integer import Integer
from mprsa.integer import multiply


class BarrettReducer:
    """Fast repeated reduction modulo a fixed modulus.

    Attributes:
        modulus: The modulus the reducer was built for.
        k: Digit length of the modulus.
        mu: The precomputed constant `BASE**(2k) // modulus`.
    """

    __slots__ = ("_modulus", "_k", "_mu", "_wrap", "_limit")

    def __init__(self, modulus: Integer | int) -> None:
        """Precomputes the reduction constant.

        Args:
            modulus: The modulus. Plain ints are converted to the default Integer width.

        Raises:
            ZeroDivisionError: If the modulus is zero.
        """
        if not isinstance(modulus, Integer):
            modulus = Integer(modulus)
        if not modulus:
            raise ZeroDivisionError("Barrett reduction requires a non-zero modulus.")
        one = type(modulus)(1)
        self._modulus = modulus
        self._k = modulus.digit_length()
        self._mu, _ = divide(one << (2 * self._k * modulus.DIGIT_BITS), modulus)
        self._wrap = one << ((self._k + 1) * modulus.DIGIT_BITS)
        self._limit = modulus * modulus

    @property
    def modulus(self) -> Integer:
        return self._modulus

    @property
    def k(self) -> int:
        return self._k

    @property
    def mu(self) -> Integer:
        return self._mu

    def reduce(self, x: Integer) -> Integer:
        """Computes `x mod modulus` without a long division.

        Args:
            x: Value in `[0, modulus**2)`.

        Returns:
            The remainder, in `[0, modulus)`.

        Raises:
            ValueError: If `x` is not below `modulus**2`.
        """
        x = type(self._modulus)(x)
        if not x < self._limit:
            raise ValueError("Barrett reduction input must be below the squared modulus.")
        k = self._k
        bits = self._modulus.DIGIT_BITS
        q = ((x >> (bits * (k - 1))) * self._mu) >> (bits * (k + 1))
        r1 = x.low_digits(k + 1)
        r2 = multiply(q, self._modulus, low_digits=k + 1)
        if r1 < r2:
            r1 = r1 + self._wrap
        r = r1 - r2
        # The estimate is never more than two short.
        while r >= self._modulus:
            r = r - self._modulus
        return r

    def multiply(self, a: Integer, b: Integer) -> Integer:
        """Returns `a * b mod modulus` for `a, b < modulus`."""
        return self.reduce(a * b)

    def __repr__(self) -> str:
        return f"BarrettReducer({self._modulus!r})"


def power(base: Integer | int, exponent: Integer | int, reducer: BarrettReducer) -> Integer:
    """Square-and-multiply modular exponentiation.

    Walks the exponent from its least significant bit, squaring the running base power every step and folding it
    into the result whenever the bit is set. All `exponent.bit_length()` steps always run.

    Args:
        base: The base. Must be below the reducer's modulus.
        exponent: The exponent.
        reducer: Reducer built for the modulus.

    Returns:
        `base**exponent mod modulus`.

    Raises:
        ValueError: If the base is not below the modulus.
    """
    n = reducer.modulus
    base, exponent = type(n)(base), type(n)(exponent)
    if not base < n:
        raise ValueError("Base must be less than the modulus.")
    result = type(n)(0) if n == 1 else type(n)(1)
    square = base
    for i in range(exponent.bit_length()):
        if exponent.test_bit(i):
            result = reducer.multiply(result, square)
        square = reducer.multiply(square, square)
    return result
