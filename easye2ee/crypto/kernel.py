"""
Modular arithmetic kernel: exponentiation, inverses, primality and
primitive roots over arbitrary-precision integers.
"""

from __future__ import annotations

import logging
import secrets

from easye2ee.common.exceptions import EntropyFailure, PrimalitySearchExhausted

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 40

SMALL_PRIMES = (
    2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53,
    59, 61, 67, 71, 73, 79, 83, 89, 97, 101, 103, 107, 109, 113,
    127, 131, 137, 139, 149, 151, 157, 163, 167, 173, 179, 181,
    191, 193, 197, 199, 211, 223, 227, 229, 233, 239, 241, 251,
    257, 263, 269, 271, 277, 281, 283, 293, 307, 311, 313, 317,
    331, 337, 347, 349, 353, 359, 367, 373, 379, 383, 389, 397,
    401, 409, 419, 421, 431, 433, 439, 443, 449, 457, 461, 463,
    467, 479, 487, 491, 499, 503, 509, 521, 523, 541, 547, 557,
    563, 569, 571, 577, 587, 593, 599, 601, 607, 613, 617, 619,
    631, 641, 643, 647, 653, 659, 661, 673, 677, 683, 691, 701,
    709, 719, 727, 733, 739, 743, 751, 757, 761, 769, 773, 787,
    797, 809, 811, 821, 823, 827, 829, 839, 853, 857, 859, 863,
    877, 881, 883, 887, 907, 911, 919, 929, 937, 941, 947, 953,
    967, 971, 977, 983, 991, 997,
)  # fmt: skip


# ---------- randomness ----------
def random_bits(bits: int) -> int:
    """Return a uniformly random non-negative integer below 2**bits."""
    try:
        return secrets.randbits(bits)
    except (OSError, NotImplementedError) as err:
        msg = "secure random source unavailable"
        raise EntropyFailure(msg) from err


def random_int_between(low: int, high: int) -> int:
    """Return a uniformly random integer in [low, high]."""
    if high < low:
        msg = f"empty range [{low}, {high}]"
        raise ValueError(msg)
    span = high - low + 1
    try:
        return low + secrets.randbelow(span)
    except (OSError, NotImplementedError) as err:
        msg = "secure random source unavailable"
        raise EntropyFailure(msg) from err


# ---------- arithmetic ----------
def modular_exponentiation(base: int, exponent: int, modulus: int) -> int:
    """Square-and-multiply computation of base**exponent mod modulus."""
    if exponent < 0:
        msg = "exponent must be non-negative"
        raise ValueError(msg)
    if modulus <= 0:
        msg = "modulus must be positive"
        raise ValueError(msg)
    if modulus == 1:
        return 0

    result = 1
    base %= modulus
    while exponent:
        if exponent & 1:
            result = result * base % modulus
        exponent >>= 1
        base = base * base % modulus
    return result


def modular_inverse(a: int, modulus: int) -> int:
    """Return d such that a*d == 1 mod modulus (extended Euclid)."""
    if modulus <= 1:
        msg = "modulus must be greater than one"
        raise ValueError(msg)
    old_r, r = a % modulus, modulus
    old_s, s = 1, 0
    while r:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
    if old_r != 1:
        msg = "mod inverse does not exist"
        raise ValueError(msg)
    return old_s % modulus


# ---------- primality ----------
def is_probable_prime(n: int, rounds: int = DEFAULT_ROUNDS) -> bool:
    """Miller-Rabin test; a composite passes with probability <= 4**-rounds."""
    if n < 2:
        return False
    for p in SMALL_PRIMES:
        if n % p == 0:
            return n == p

    # n - 1 = 2**s * d with d odd
    d, s = n - 1, 0
    while d & 1 == 0:
        d >>= 1
        s += 1

    for _ in range(rounds):
        a = random_int_between(2, n - 2)
        x = modular_exponentiation(a, d, n)
        if x in (1, n - 1):
            continue
        for __ in range(s - 1):
            x = modular_exponentiation(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def generate_large_prime(
    bit_length: int,
    rounds: int = DEFAULT_ROUNDS,
    max_attempts: int | None = None,
) -> int:
    """Sample odd integers of exactly bit_length bits until one is prime."""
    if bit_length < 2:  # noqa: PLR2004
        msg = "bit_length must be at least 2"
        raise ValueError(msg)

    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        candidate = random_bits(bit_length) | (1 << (bit_length - 1)) | 1
        if is_probable_prime(candidate, rounds):
            logger.debug("Found %d-bit prime after %d candidates", bit_length, attempts)
            return candidate

    msg = f"no {bit_length}-bit prime found in {max_attempts} attempts"
    raise PrimalitySearchExhausted(msg)


def _small_prime_sieve_safe(q: int) -> bool:
    """Reject q when q or 2q + 1 has a small factor."""
    for p in SMALL_PRIMES:
        if q % p == 0:
            return q == p
        if (2 * q + 1) % p == 0:
            return False
    return True


def generate_safe_prime(
    bit_length: int,
    rounds: int = DEFAULT_ROUNDS,
    max_attempts: int | None = None,
) -> int:
    """Return a prime p = 2q + 1 of bit_length bits with q also prime."""
    if bit_length < 3:  # noqa: PLR2004
        msg = "bit_length must be at least 3"
        raise ValueError(msg)

    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        q = random_bits(bit_length - 1) | (1 << (bit_length - 2)) | 1
        if not _small_prime_sieve_safe(q):
            continue
        if is_probable_prime(q, rounds) and is_probable_prime(2 * q + 1, rounds):
            logger.debug(
                "Found %d-bit safe prime after %d candidates", bit_length, attempts
            )
            return 2 * q + 1

    msg = f"no {bit_length}-bit safe prime found in {max_attempts} attempts"
    raise PrimalitySearchExhausted(msg)


# ---------- group structure ----------
def factorize(n: int, rounds: int = DEFAULT_ROUNDS) -> set[int]:
    """Return the distinct prime factors of n by trial division.

    Division stops once the remaining cofactor is itself a probable prime,
    which keeps p - 1 of a safe prime cheap to factor.
    """
    if n < 1:
        msg = "n must be positive"
        raise ValueError(msg)

    if is_probable_prime(n, rounds):
        return {n}

    factors: set[int] = set()
    remaining = n
    divisor = 2
    while remaining > 1:
        if divisor * divisor > remaining:
            factors.add(remaining)
            break
        if remaining % divisor == 0:
            factors.add(divisor)
            while remaining % divisor == 0:
                remaining //= divisor
            if remaining > 1 and is_probable_prime(remaining, rounds):
                factors.add(remaining)
                break
        divisor += 1 if divisor == 2 else 2  # noqa: PLR2004
    return factors


def find_primitive_root(p: int, rounds: int = DEFAULT_ROUNDS) -> int:
    """Return the smallest generator of the multiplicative group mod prime p."""
    if p == 2:  # noqa: PLR2004
        return 1
    if p < 2:  # noqa: PLR2004
        msg = "p must be prime"
        raise ValueError(msg)

    order = p - 1
    factors = factorize(order, rounds)
    g = 2
    while g < p:
        if all(modular_exponentiation(g, order // f, p) != 1 for f in factors):
            return g
        g += 1

    msg = f"{p} has no primitive root; it is not prime"
    raise ValueError(msg)
