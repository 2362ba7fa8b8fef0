"""Provides textbook RSA on top of the multi-precision engine, plus message packing into digit blocks.

Handles the key objects and the marshalling of byte strings into sequences of Integer blocks. Every key builds one
Barrett reducer for its modulus and reuses it for all blocks of every message.

Typical usage example:

    pk = RSAPrivKey.generate(256)
    c = pk.pub.encrypt(b"Hi there!")
    r = pk.decrypt(c, length=9)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from typing import Iterable, Sequence

from mprsa import keygen
from mprsa.integer import Integer
from mprsa.reduction import BarrettReducer
from mprsa.reduction import power


class RSAKey:
    """Common base of the public and private keys.

    Holds what both halves need to run the RSA permutation on message blocks: the modulus, one exponent and the
    reducer bound to the modulus.

    Attributes:
        mod: The modulus of the keypair.
        expo: The exponent of the key, whether private or public.
        reducer: The Barrett reducer bound to `mod`.
        block_digits: Digits per plaintext block. One less than the modulus so every block stays below it.
    """

    def __init__(self, mod: Integer | int, expo: Integer | int) -> None:
        self.mod = mod if isinstance(mod, Integer) else Integer(mod)
        self.expo = type(self.mod)(expo)
        self.reducer = BarrettReducer(self.mod)
        self.block_digits = self.mod.digit_length() - 1

    def c_rsa(self, message: Integer) -> Integer:
        """Performs core RSA operation. (Encrypt/Decrypt/Sign/Verify).

        Args:
            message: The block to transform.

        Returns:
            The transformed block.

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        return power(message, self.expo, self.reducer)

    def transform(self, blocks: Iterable[Integer]) -> list[Integer]:
        """Applies `c_rsa` to every block of a message."""
        return [self.c_rsa(block) for block in blocks]

    def _plain_digits(self) -> int:
        if self.block_digits < 1:
            raise ValueError("Modulus too small to carry message blocks.")
        return self.block_digits


class RSAPubKey(RSAKey):
    """A rather straightforward subclass of RSAKey, for Public Keys."""

    def encrypt(self, message: bytes) -> list[Integer]:
        """Packs the message into blocks and encrypts each of them.

        Args:
            message: The message to encrypt. Padded with NUL bytes to a whole number of blocks.

        Returns:
            The ciphertext blocks.
        """
        return self.transform(pack(message, self._plain_digits(), type(self.mod)))

    def verify(self, message: bytes, signature: Sequence[Integer]) -> bool:
        """Verify a raw block signature of the message.

        Args:
            message: The message to verify the signature against.
            signature: The signature blocks produced by `RSAPrivKey.sign`.

        Returns:
            True if the signature matches the message, False otherwise.
        """
        digits = self._plain_digits()
        try:
            recovered = unpack(self.transform(signature), digits)
        except (ValueError, OverflowError):
            return False
        return recovered == unpack(pack(message, digits, type(self.mod)), digits)


class RSAPrivKey(RSAKey):
    """RSA Private Key class implementation.

    Attributes:
        mod: The modulus of the keypair.
        expo: The private exponent of the key.
        pub: The public key of the key.
        p: Private Prime 1.
        q: Private Prime 2.
    """

    def __init__(self,
                 mod: Integer | int,
                 pub_exp: Integer | int,
                 priv_exp: Integer | int,
                 p: Integer | int | None = None,
                 q: Integer | int | None = None) -> None:
        super().__init__(mod, priv_exp)
        self.pub: RSAPubKey = RSAPubKey(self.mod, pub_exp)
        self.p: Integer | None = type(self.mod)(p) if p is not None else None
        self.q: Integer | None = type(self.mod)(q) if q is not None else None

    def decrypt(self, ciphertext: Sequence[Integer], length: int | None = None) -> bytes:
        """Decrypts the blocks and unpacks them into bytes.

        Args:
            ciphertext: The ciphertext blocks.
            length: Original message length. If given, block padding is cut off.

        Returns:
            The decrypted message.
        """
        clear = unpack(self.transform(ciphertext), self._plain_digits())
        return clear if length is None else clear[:length]

    def sign(self, message: bytes) -> list[Integer]:
        """Raw block signature: packs the message and applies the private exponent."""
        return self.transform(pack(message, self._plain_digits(), type(self.mod)))

    def key_pair(self) -> keygen.KeyPair:
        """Returns the key as a KeyPair.

        Raises:
            ValueError: If the key was built without its factors.
        """
        if self.p is None or self.q is None:
            raise ValueError("Key has no prime factors attached.")
        return keygen.KeyPair(self.mod, self.pub.expo, self.expo, self.p, self.q)

    @classmethod
    def from_key_pair(cls, pair: keygen.KeyPair) -> "RSAPrivKey":
        """Wraps an already verified KeyPair, keeping its factors."""
        return cls(pair.n, pair.e, pair.d, pair.p, pair.q)

    @classmethod
    def generate(cls, size: int = keygen.DEFAULT_KEY_SIZE, trials: int = keygen.TRIALS) -> "RSAPrivKey":
        """Generates a fresh key pair and wraps it as a private key with its public half.

        Args:
            size: The bit size of the modulus.
            trials: Number of primality trials per prime candidate.

        Returns:
            The new private key, `pub` set and factors attached.
        """
        return cls.from_key_pair(keygen.generate_key_pair(size, trials))


def pack(data: bytes, digits: int, integer_type: type[Integer] = Integer) -> list[Integer]:
    """Packs a byte string into blocks of `digits` words each.

    Bytes are stored least significant first within each word, and words least significant first within a block.
    The input is padded with NUL bytes up to a whole number of blocks.

    Args:
        data: The bytes to pack.
        digits: Words per block.
        integer_type: The Integer class providing the word size.

    Returns:
        The blocks.

    Raises:
        ValueError: If `digits` is not positive.
    """
    if digits < 1:
        raise ValueError("Blocks must hold at least one digit.")
    block_bytes = digits * integer_type.WORD_BYTES
    padded = data + b"\x00" * (-len(data) % block_bytes)
    return [integer_type.from_bytes(padded[i:i + block_bytes]) for i in range(0, len(padded), block_bytes)]


def unpack(blocks: Iterable[Integer], digits: int) -> bytes:
    """Unpacks blocks of `digits` words each back into bytes.

    Raises:
        OverflowError: If a block does not fit in `digits` words.
    """
    return b"".join(block.to_bytes(digits) for block in blocks)


def repack(blocks: Sequence[Integer], src_digits: int, dst_digits: int) -> list[Integer]:
    """Re-cuts a block sequence from `src_digits` to `dst_digits` words per block."""
    integer_type = type(blocks[0]) if blocks else Integer
    return pack(unpack(blocks, src_digits), dst_digits, integer_type)
