"""Timing harness for key generation and the two-key message round trip.

Running totals are explicit values: callers pass a `BenchmarkTotals` in and get the updated one back, nothing is kept
at module level.

Typical usage example:

    report, totals = run_encryption(b"Attack at dawn", 256, BenchmarkTotals())
    print(totals.throughput())
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import time
from typing import NamedTuple

from mprsa import keygen
from mprsa.rsa import pack
from mprsa.rsa import repack
from mprsa.rsa import RSAPrivKey
from mprsa.rsa import unpack

logger = logging.getLogger(__name__)


class BenchmarkTotals(NamedTuple):
    """Accumulated totals across benchmark runs."""
    seconds: float = 0.0
    processed_bytes: int = 0

    def add(self, seconds: float, processed_bytes: int) -> "BenchmarkTotals":
        return BenchmarkTotals(self.seconds + seconds, self.processed_bytes + processed_bytes)

    def throughput(self) -> float:
        """Bytes per second over all runs, zero before any time was recorded."""
        return self.processed_bytes / self.seconds if self.seconds else 0.0


class EncryptionReport(NamedTuple):
    """Result of a single `run_encryption` call.

    Attributes:
        output: The recovered plaintext, cut to the input length.
        ciphertext: The final ciphertext blocks.
        key_generation: Seconds spent generating both key pairs.
        encryption: Seconds spent encrypting, repacking included.
        decryption: Seconds spent decrypting, repacking included.
        packing: Seconds spent in pack, unpack and repack.
    """
    output: bytes
    ciphertext: list
    key_generation: float
    encryption: float
    decryption: float
    packing: float

    @property
    def total(self) -> float:
        return self.key_generation + self.encryption + self.decryption


def run_encryption(text: bytes,
                   size: int,
                   totals: BenchmarkTotals,
                   trials: int = keygen.TRIALS) -> tuple[EncryptionReport, BenchmarkTotals]:
    """Signs with key A, encrypts for key B, then reverses both steps.

    Computes `E_a(D_b(E_b(D_a(M))))` with two fresh key pairs. Blocks coming out of key A can use every digit of
    `n_a`, so they are repacked to one digit less than `n_b` before key B touches them, and back again on the way
    out.

    Args:
        text: The plaintext.
        size: Modulus size in bits for both key pairs.
        totals: Totals accumulated so far.
        trials: Primality trials per prime candidate.

    Returns:
        The report for this run and the updated totals.
    """
    start = time.perf_counter()
    logger.info("Generating key A")
    keys_a = RSAPrivKey.generate(size, trials)
    logger.info("Generating key B")
    keys_b = RSAPrivKey.generate(size, trials)
    key_generation = time.perf_counter() - start
    digits_a = keys_a.mod.digit_length()
    digits_b = keys_b.mod.digit_length()
    packing = 0.0

    mark = time.perf_counter()
    blocks = pack(text, digits_a - 1)
    packing += time.perf_counter() - mark

    start = time.perf_counter()
    blocks = keys_a.transform(blocks)
    mark = time.perf_counter()
    blocks = repack(blocks, digits_a, digits_b - 1)
    packing += time.perf_counter() - mark
    ciphertext = keys_b.pub.transform(blocks)
    encryption = time.perf_counter() - start

    start = time.perf_counter()
    blocks = keys_b.transform(ciphertext)
    mark = time.perf_counter()
    blocks = repack(blocks, digits_b - 1, digits_a)
    packing += time.perf_counter() - mark
    blocks = keys_a.pub.transform(blocks)
    decryption = time.perf_counter() - start

    mark = time.perf_counter()
    output = unpack(blocks, digits_a - 1)[:len(text)]
    packing += time.perf_counter() - mark

    report = EncryptionReport(output, ciphertext, key_generation, encryption, decryption, packing)
    # The data passes through four transforms.
    processed = len(text) * 4
    logger.info("Round trip of %d bytes: encryption %.3fs, decryption %.3fs, packing %.3fs", len(text), encryption,
                decryption, packing)
    return report, totals.add(encryption + decryption, processed)


def benchmark_key_generation(size: int, runs: int, trials: int = keygen.TRIALS) -> list[float]:
    """Times `runs` key pair generations of `size` bits.

    Returns:
        Seconds per run, in order.
    """
    timings = []
    start = time.perf_counter()
    for run in range(runs):
        mark = time.perf_counter()
        keygen.generate_key_pair(size, trials)
        timings.append(time.perf_counter() - mark)
        logger.info("Run %d: running average %.3fs", run, (time.perf_counter() - start) / (run + 1))
    return timings
