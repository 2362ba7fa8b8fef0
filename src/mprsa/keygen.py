"""Core Key Generation Utility: primality testing, prime generation, modular inverse and key pairs.

Everything here runs on the multi-precision `Integer` and uses Barrett-driven modular exponentiation. Primality is
decided by a Solovay-Strassen test (Jacobi symbol plus Euler's criterion) behind a small trial-division filter.
Prime generation is a Las Vegas loop: it always returns a probable prime, but how long it takes is only bounded in
expectation unless the caller supplies `max_attempts`.

Typical usage example:

    p = generate_prime_bits(128)
    pair = generate_key_pair(256)
    d = inverse(Integer(3), Integer(11))
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import itertools
import logging
from typing import NamedTuple

from mprsa.integer import Integer
from mprsa.reduction import BarrettReducer
from mprsa.reduction import power

logger = logging.getLogger(__name__)

TRIALS: int = 10
DEFAULT_KEY_SIZE: int = 384
_SMALL_PRIME_BOUND: int = 1000


class KeyPair(NamedTuple):
    """An RSA key pair along with its factors.

    Attributes:
        n: The modulus, `p * q`.
        e: The public exponent.
        d: The private exponent, `e**-1 mod (p-1)(q-1)`.
        p: First prime factor.
        q: Second prime factor.
    """
    n: Integer
    e: Integer
    d: Integer
    p: Integer
    q: Integer


def _sieve(n: int) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes over odd numbers only, sieving until root.

    Args:
        n: The number up to which to generate primes. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


_SMALL_PRIMES: tuple[int, ...] = tuple(_sieve(_SMALL_PRIME_BOUND))


def _integer(value: Integer | int) -> Integer:
    return value if isinstance(value, Integer) else Integer(value)


def gcd(a: Integer, b: Integer) -> Integer:
    """Greatest common divisor by Euclid's algorithm."""
    while b:
        a, b = b, a % b
    return a


def jacobi(a: Integer, n: Integer) -> int:
    """Computes the Jacobi symbol (a/n) for odd positive `n`.

    Iterative form of the recursive rules: factors of two are pulled out with the (2/n) rule, then the quadratic
    reciprocity law swaps the arguments and the larger one is reduced.

    Args:
        a: The numerator.
        n: The denominator. Must be odd and positive.

    Returns:
        -1, 0 or 1.

    Raises:
        ValueError: If `n` is even or zero.
    """
    if not n.test_bit(0):
        raise ValueError("Jacobi symbol requires an odd positive denominator.")
    a = a % n
    result = 1
    while a:
        while not a.test_bit(0):
            a = a >> 1
            if n.digits[0] & 7 in (3, 5):
                result = -result
        a, n = n, a
        if a.digits[0] & 3 == 3 and n.digits[0] & 3 == 3:
            result = -result
        a = a % n
    return result if n == 1 else 0


def _trial_division(no: Integer) -> bool | None:
    """Check the provided `no` against the known small primes.

    Runs a fast pre-check before Solovay-Strassen by using modulo division on our known frequent primes.

    Args:
        no: The odd number to check, at least 3.

    Returns:
        False if `no` is composite, True if it is proven prime, None if undecided.
    """
    for prime in _SMALL_PRIMES:
        if prime * prime > no:
            return True
        if no % prime == 0:
            return no == prime
    return None


def _solovay_strassen(w: Integer, trials: int) -> bool:
    """Perform the Solovay-Strassen primality test.

    Each trial draws a random witness `a` and checks Euler's criterion `a**((w-1)/2) == (a/w) mod w`. A composite
    survives one trial with probability at most 1/2.

    Args:
        w: Integer to be tested.
        trials: Number of independent trials to perform.

    Returns:
        True if `w` is probably prime, False if it is certainly composite.
    """
    if w == 2:
        return True
    if w < 2 or not w.test_bit(0):
        return False
    reducer = BarrettReducer(w)
    w_minus_one = w - 1
    exponent = w_minus_one >> 1
    for _ in range(trials):
        a = type(w).random_range(2, w)
        if gcd(a, w) != 1:
            return False
        euler = power(a, exponent, reducer)
        symbol = jacobi(a, w)
        if not ((symbol == -1 and euler == w_minus_one) or (symbol == 1 and euler == 1)):
            return False
    return True


def is_probable_prime(candidate: Integer | int, trials: int = TRIALS) -> bool:
    """Performs a composite primality test: trial division by small primes, then Solovay-Strassen.

    Args:
        candidate: The candidate prime to test.
        trials: Number of Solovay-Strassen trials. A composite passes with probability at most `2**-trials`.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    candidate = _integer(candidate)
    if candidate < 2:
        return False
    if candidate == 2:
        return True
    if not candidate.test_bit(0):
        return False
    verdict = _trial_division(candidate)
    if verdict is not None:
        return verdict
    return _solovay_strassen(candidate, trials)


def _is_mersenne_form(candidate: Integer) -> bool:
    return not ((candidate + 1) & candidate)


def generate_prime(minimum: Integer | int,
                   maximum: Integer | int,
                   trials: int = TRIALS,
                   max_attempts: int | None = None) -> Integer:
    """Generate a probable prime in `[minimum, maximum)`.

    Samples uniformly in the range, forces the candidate odd, skips numbers of the form `2**k - 1` and returns the
    first candidate that passes `is_probable_prime`.

    Args:
        minimum: Inclusive lower bound.
        maximum: Exclusive upper bound.
        trials: Number of primality trials per candidate.
        max_attempts: Cap on the number of candidates drawn. Unbounded if None, in which case a range without
            suitable primes never returns.

    Returns:
        A probable prime.

    Raises:
        ValueError: If the range is empty.
        RuntimeError: If `max_attempts` candidates were drawn without finding a prime.
    """
    minimum = _integer(minimum)
    maximum = type(minimum)(maximum)
    if minimum >= maximum:
        raise ValueError("Prime range is empty.")
    attempts = itertools.count() if max_attempts is None else range(max_attempts)
    for attempt in attempts:
        candidate = type(minimum).random_range(minimum, maximum) | 1
        if candidate >= maximum or _is_mersenne_form(candidate):
            continue
        if is_probable_prime(candidate, trials):
            logger.debug("Prime found after %d candidates: %s", attempt + 1, candidate)
            return candidate
    raise RuntimeError(f"No prime found in {max_attempts} attempts. Check the range and the random number generator.")


def generate_prime_bits(bits: int, trials: int = TRIALS, max_attempts: int | None = None) -> Integer:
    """Generate a probable prime of exactly `bits` bits with the top two bits set.

    Setting the two top bits guarantees the product of two such primes has exactly `2 * bits` bits.

    Raises:
        ValueError: If `bits` is below 4.
    """
    if bits < 4:
        raise ValueError("Prime size must be at least 4 bits.")
    one = Integer(1)
    return generate_prime((one << (bits - 1)) | (one << (bits - 2)), one << bits, trials, max_attempts)


def inverse(u: Integer | int, v: Integer | int) -> Integer:
    """Computes `u**-1 mod v` with the extended Euclidean algorithm.

    Follows Knuth's Algorithm X (TAOCP Vol. 2) without the second coefficient, tracking the sign of the coefficient
    as a parity flag so no intermediate value is ever negative.

    Args:
        u: The value to invert.
        v: The modulus. Must be greater than one.

    Returns:
        `d` in `[0, v)` with `u * d mod v == 1`.

    Raises:
        ValueError: If `v <= 1` or `u` and `v` are not coprime.
    """
    u = _integer(u)
    v = type(u)(v)
    if v <= 1:
        raise ValueError("Modulus must be greater than one.")
    u1, u3, v1, v3 = type(u)(1), u, type(u)(0), v
    odd = False
    while v3:
        q, t3 = divmod(u3, v3)
        w = q * v1
        u1, v1, u3, v3 = v1, u1 + w, v3, t3
        odd = not odd
    if u3 != 1:
        raise ValueError("Modular inverse does not exist: operands are not coprime.")
    return v - u1 if odd else u1


def key_pair_from_primes(p: Integer | int, q: Integer | int, e: Integer | int) -> KeyPair:
    """Builds and verifies a key pair from given primes and public exponent.

    Args:
        p: First prime.
        q: Second prime, distinct from `p`.
        e: Public exponent, coprime to `(p-1)(q-1)` and to `p * q`.

    Returns:
        The complete KeyPair.

    Raises:
        ValueError: If `p == q`, `e` shares a factor with the modulus or `e` is not invertible modulo the totient.
        RuntimeError: If the computed private exponent fails verification.
    """
    p = _integer(p)
    q, e = type(p)(q), type(p)(e)
    if p == q:
        raise ValueError("Key primes must be distinct.")
    n = p * q
    # An exponent equal to a factor would publish the factorisation.
    if gcd(e, n) != 1:
        raise ValueError("Public exponent must be coprime to the modulus.")
    totient = (p - 1) * (q - 1)
    d = inverse(e, totient)
    if (e * d) % totient != 1:
        raise RuntimeError("Key pair verification failed: e * d mod phi != 1.")
    return KeyPair(n, e, d, p, q)


def generate_key_pair(size: int = DEFAULT_KEY_SIZE,
                      trials: int = TRIALS,
                      exponent_range: tuple[Integer | int, Integer | int] | None = None,
                      max_attempts: int | None = None) -> KeyPair:
    """Generates an RSA key pair.

    Draws two distinct primes of `size // 2` bits, then draws the public exponent as a prime in `exponent_range`.
    Exponents equal to one of the primes or sharing a factor with the totient are redrawn until one is usable.

    Args:
        size: Bit length of the modulus. Must be even and at least 16.
        trials: Number of primality trials per candidate.
        exponent_range: `[minimum, maximum)` for the public exponent. Defaults to primes of `size // 2` bits.
        max_attempts: Candidate cap passed on to every prime generation.

    Returns:
        The generated KeyPair.

    Raises:
        ValueError: If `size` is odd or too small.
    """
    if size < 16:
        raise ValueError("Size must be at least 16.")
    if size % 2 != 0:
        raise ValueError("Size must be an even number.")
    half = size // 2
    p = generate_prime_bits(half, trials, max_attempts)
    q = generate_prime_bits(half, trials, max_attempts)
    while q == p:
        q = generate_prime_bits(half, trials, max_attempts)
    if exponent_range is None:
        exponent_range = (type(p)(1) << (half - 1), type(p)(1) << half)
    while True:
        e = generate_prime(*exponent_range, trials=trials, max_attempts=max_attempts)
        try:
            pair = key_pair_from_primes(p, q, e)
        except ValueError as exc:
            logger.debug("Public exponent %s rejected (%s), redrawing.", e, exc)
            continue
        logger.debug("Generated %d-bit key pair with modulus %s", pair.n.bit_length(), pair.n)
        return pair
