import math
from bisect import bisect_left

import sympy as sp

# ==============================
# 🔢 Prime table
# ==============================

# 168 primes, ascending. Everything below is bounded by this table.
PRIMES_BELOW_1000 = tuple(int(p) for p in sp.primerange(2, 1000))

def is_perfect_square(n: int) -> bool:
    # Negative tops (only -1 shows up) are never squares
    if n < 0:
        return False
    root = math.isqrt(n)
    return root * root == n

def integer_sqrt(n: int) -> int:
    return math.isqrt(n)

def is_prime(n: int, primes=PRIMES_BELOW_1000) -> bool:
    """Table lookup. Assumes n is below the largest table entry."""
    i = bisect_left(primes, n)
    return i < len(primes) and primes[i] == n

def prime_factorization(n: int, primes=PRIMES_BELOW_1000) -> dict:
    """
    Map each prime factor of n to its exponent, ascending by prime.

    Only primes from the table are tried, so any cofactor left over
    after the last table prime is dropped.
    """
    answer = {}

    for p in primes:
        exponent = 0
        while n % p == 0:
            exponent += 1
            n //= p

        if exponent > 0:
            answer[p] = exponent

        if n == 1:
            break

    return answer
