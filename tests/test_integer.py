# pylint: disable=protected-access,missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import random

import pytest

from mprsa import integer
from mprsa.integer import Integer
from mprsa.integer import Ordering


class Integer8(Integer, digit_bits=8):
    pass


class Integer16(Integer, digit_bits=16):
    pass


rng = random.Random(0x5EED)
WIDTHS = [Integer, Integer8, Integer16]


def random_values(count: int, max_bits: int = 300) -> list[int]:
    values = [0, 1, 2, 255, 256, 2**32 - 1, 2**32, 2**64 - 1, 2**64 + 1]
    values += [rng.getrandbits(rng.randint(1, max_bits)) for _ in range(count)]
    return values


def id_generator(param):
    if isinstance(param, int) and param > 1000000:
        return f"LargeInt-{param.bit_length()}bits"
    if isinstance(param, type):
        return param.__name__
    return str(param)


@pytest.fixture(scope="module", params=WIDTHS, ids=id_generator)
def itype(request) -> type[Integer]:
    return request.param


hex_cases = [
    ("0", 0),
    ("1", 1),
    ("FFFFFFFF", 2**32 - 1),
    ("100000000", 2**32),
    ("0000001390143BDA", 0x1390143BDA),
    ("deadBEEF", 0xDEADBEEF),
    ("0x1F", 0x1F),
    ("31EB3579FFFFFFFFFFFFFFFFFFFFFFEC6FEBC427", 0x31EB3579FFFFFFFFFFFFFFFFFFFFFFEC6FEBC427),
]


@pytest.mark.parametrize("text,expected", hex_cases)
def test_hex_construction(itype, text, expected):
    assert int(itype(text)) == expected


@pytest.mark.parametrize("text", ["", "0x", "XYZ", "-1", "1_0", "12 34", "+5", " FF", "FF\n", "\tFF"])
def test_hex_construction_validates(text):
    with pytest.raises(ValueError):
        Integer(text)


@pytest.mark.parametrize("value", [0, 1, 0xABC, 2**32, 2**100 + 7])
def test_hex_rendering(itype, value):
    x = itype(value)
    assert x.to_hex() == f"{value:X}"
    assert str(x) == x.to_hex()
    assert itype(repr(x).split("'")[1]) == x


def test_repr():
    assert repr(Integer(255)) == "Integer('FF')"


def test_known_addition():
    x = Integer("31EB3579FFFFFFFFFFFFFFFFFFFFFFEC6FEBC427")
    y = Integer("0000001390143BDA")
    assert x + y == Integer("31EB357A00000000000000000000000000000001")


@pytest.mark.parametrize("value", [-1, -2**64])
def test_negative_rejected(value):
    with pytest.raises(ValueError):
        Integer(value)


@pytest.mark.parametrize("value", [1.5, None, True, b"\x01"])
def test_unsupported_types_rejected(value):
    with pytest.raises(TypeError):
        Integer(value)


def test_trimmed_digits():
    assert Integer.from_digits([5, 0, 0]).digits == (5,)
    assert Integer.from_digits([]).digits == (0,)
    assert Integer(0).digits == (0,)
    assert Integer(2**32).digits == (0, 1)
    assert (Integer(2**64) - Integer(1)).digits == (2**32 - 1, 2**32 - 1)
    assert (Integer(2**64) - Integer(2**64)).digits == (0,)


def test_from_digits_validates():
    with pytest.raises(ValueError):
        Integer.from_digits([2**32])
    with pytest.raises(ValueError):
        Integer8.from_digits([1, 256])


def test_digit_width_validates():
    with pytest.raises(ValueError):
        type("Integer12", (Integer,), {}, digit_bits=12)


def test_digit_widths_do_not_mix():
    with pytest.raises(TypeError):
        _ = Integer(5) + Integer16(5)
    with pytest.raises(TypeError):
        integer.compare(Integer(5), Integer8(5))
    with pytest.raises(TypeError):
        _ = Integer(5) < Integer16(6)


def test_equality_across_digit_widths():
    assert Integer(5) == Integer16(5)
    assert Integer8(2**40 + 3) == Integer(2**40 + 3)
    assert Integer(5) != Integer16(6)
    assert len({Integer(5), Integer16(5), Integer8(5), 5}) == 1
    assert Integer16(300) in {Integer(300)}


def test_int_interoperability():
    x = Integer(10)
    assert x + 5 == 15
    assert 5 + x == 15
    assert 20 - x == 10
    assert 3 * x == 30
    assert 25 // x == 2
    assert 25 % x == 5
    assert x == 10
    assert x != "10"
    assert x > 9 and x >= 10 and x < 11 and x <= 10
    assert hash(x) == hash(10)
    assert len({Integer(10), 10, Integer(11)}) == 2


@pytest.mark.parametrize("a,b,expected", [(0, 0, Ordering.EQ), (1, 0, Ordering.GT), (0, 1, Ordering.LT),
                                          (2**32, 2**32 - 1, Ordering.GT), (2**64 + 1, 2**64 + 2, Ordering.LT),
                                          (2**100, 2**100, Ordering.EQ)])
def test_compare(itype, a, b, expected):
    assert integer.compare(itype(a), itype(b)) is expected


def test_add_subtract_inverse(itype):
    values = random_values(40)
    for a, b in zip(values, reversed(values)):
        big, small = max(a, b), min(a, b)
        x, y = itype(big), itype(small)
        assert int(integer.add(x, y)) == big + small
        diff = integer.subtract(x, y)
        assert int(diff) == big - small
        assert integer.add(diff, y) == x


def test_add_length_bound():
    x = Integer(2**96 - 1)
    assert (x + x).digit_length() <= x.digit_length() + 1
    assert (x + 1).digit_length() == 4


def test_subtract_underflow(itype):
    with pytest.raises(integer.UnderflowError):
        integer.subtract(itype(5), itype(6))
    with pytest.raises(ArithmeticError):
        _ = itype(2**64) - itype(2**64 + 1)


@pytest.mark.parametrize("count", [0, 1, 7, 8, 15, 16, 31, 32, 33, 64, 100, 301, 1000])
def test_shifts(itype, count):
    for value in random_values(10):
        x = itype(value)
        assert int(integer.shift_left(x, count)) == value << count
        assert int(integer.shift_right(x, count)) == value >> count
        assert int(x << count >> count) == value


def test_shift_past_length_is_zero():
    assert Integer(2**100) >> 101 == 0
    assert (Integer(2**100) >> 101).digits == (0,)
    assert (Integer(0) << 100).digits == (0,)


@pytest.mark.parametrize("count", [-1, -64])
def test_negative_shift(count):
    with pytest.raises(ValueError):
        _ = Integer(1) << count
    with pytest.raises(ValueError):
        _ = Integer(1) >> count


def test_multiply(itype):
    values = random_values(40)
    for a, b in zip(values, reversed(values)):
        product = integer.multiply(itype(a), itype(b))
        assert int(product) == a * b
        assert product.digit_length() <= itype(a).digit_length() + itype(b).digit_length()


@pytest.mark.parametrize("low", [1, 2, 3, 5, 40])
def test_multiply_low_digits(itype, low):
    a, b = rng.getrandbits(200), rng.getrandbits(150)
    partial = integer.multiply(itype(a), itype(b), low_digits=low)
    assert int(partial) == (a * b) % (itype.BASE**low)


def test_divide(itype):
    values = random_values(60, 400)
    divisors = [v for v in random_values(60, 200) if v]
    for a in values:
        for b in rng.sample(divisors, 8):
            q, r = integer.divide(itype(a), itype(b))
            assert int(q) * b + int(r) == a
            assert r < itype(b)
            assert (int(q), int(r)) == divmod(a, b)


@pytest.mark.parametrize(
    "a,b",
    [
        # Dividend and divisor shapes that force quotient digit corrections.
        (0x7FFF800000000000, 0x800000000001),
        (0x80000000FFFFFFFF00000000, 0x80000000FFFFFFFF),
        (2**128 - 1, 2**64 + 1),
        (2**192, 2**96 - 1),
        (2**200 + 2**100, 2**100 + 1),
        ((2**64 - 1) * (2**64 - 2), 2**64 - 1),
    ],
    ids=id_generator)
def test_divide_edge_shapes(itype, a, b):
    q, r = divmod(itype(a), itype(b))
    assert (int(q), int(r)) == divmod(a, b)
    assert int(itype(a) // itype(b)) == a // b
    assert int(itype(a) % itype(b)) == a % b


def test_divide_by_zero(itype):
    with pytest.raises(ZeroDivisionError):
        integer.divide(itype(12345), itype(0))
    with pytest.raises(ZeroDivisionError):
        _ = itype(0) % 0


def test_bitwise(itype):
    values = random_values(20)
    for a, b in zip(values, reversed(values)):
        assert int(itype(a) & itype(b)) == a & b
        assert int(itype(a) | itype(b)) == a | b


def test_bits(itype):
    for value in random_values(20):
        x = itype(value)
        assert x.bit_length() == value.bit_length()
        for i in (0, 1, 8, 31, 32, 63, 64, 299, 500):
            assert x.test_bit(i) == bool((value >> i) & 1)


def test_low_digits():
    x = Integer(0x1111111122222222333333334444444455555555)
    assert x.low_digits(2) == 0x4444444455555555
    assert x.low_digits(0) == 0
    assert x.low_digits(10) == x


def test_from_bytes_word_order():
    assert Integer.from_bytes(b"\x01\x00\x00\x00\x02\x00\x00\x00") == 1 + (2 << 32)
    assert Integer.from_bytes(b"\x00\x00\x00\x80") == 2**31
    assert Integer16.from_bytes(b"\x34\x12\x78\x56") == 0x56781234
    assert Integer.from_bytes(b"") == 0


def test_from_bytes_validates():
    with pytest.raises(ValueError):
        Integer.from_bytes(b"\x01\x02\x03")


def test_to_bytes():
    assert Integer(1 + (2 << 32)).to_bytes(2) == b"\x01\x00\x00\x00\x02\x00\x00\x00"
    assert Integer(1).to_bytes(3) == b"\x01" + b"\x00" * 11
    assert Integer(0).to_bytes(0) == b""
    with pytest.raises(OverflowError):
        Integer(2**64).to_bytes(2)


@pytest.mark.parametrize("length", [0, 4, 8, 64, 128])
def test_bytes_round_trip(itype, length):
    data = bytes(rng.getrandbits(8) for _ in range(length))
    x = itype.from_bytes(data)
    assert x.to_bytes(length // itype.WORD_BYTES) == data


def test_random_range(itype):
    for _ in range(200):
        x = itype.random_range(2**40, 2**40 + 17)
        assert 2**40 <= x < 2**40 + 17
    assert itype.random_range(5, 6) == 5


def test_random_range_validates():
    with pytest.raises(ValueError):
        Integer.random_range(10, 10)


def test_random_bits(mocker):
    mocker.patch("secrets.randbits", side_effect=[0xFFFFFFFF, 0x3])
    x = Integer.random_bits(34)
    assert x == 0x3FFFFFFFF
