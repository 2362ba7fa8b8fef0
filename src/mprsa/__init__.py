"""Multi-precision RSA arithmetic in an Academic Sense.

Provides an arbitrary-precision integer built from machine-word digits, Barrett reduction, square-and-multiply
modular exponentiation, Solovay-Strassen primality testing, prime generation, modular inverse and RSA key pair
generation on top of it.

Typical usage example:

    pair = generate_key_pair(256)
    reducer = BarrettReducer(pair.n)
    c = power(Integer(42), pair.e, reducer)
    m = power(c, pair.d, reducer)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from mprsa.integer import compare
from mprsa.integer import divide
from mprsa.integer import Integer
from mprsa.integer import Ordering
from mprsa.integer import UnderflowError
from mprsa.keygen import generate_key_pair
from mprsa.keygen import generate_prime
from mprsa.keygen import inverse
from mprsa.keygen import is_probable_prime
from mprsa.keygen import KeyPair
from mprsa.reduction import BarrettReducer
from mprsa.reduction import power
from mprsa.rsa import RSAPrivKey
from mprsa.rsa import RSAPubKey

__version__ = "0.0.1"
__all__ = [
    "BarrettReducer",
    "Integer",
    "KeyPair",
    "Ordering",
    "RSAPrivKey",
    "RSAPubKey",
    "UnderflowError",
    "compare",
    "divide",
    "generate_key_pair",
    "generate_prime",
    "inverse",
    "is_probable_prime",
    "power",
]
