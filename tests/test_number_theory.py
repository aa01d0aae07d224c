import pytest

from residue_core.number_theory import (
    PRIMES_BELOW_1000,
    is_perfect_square,
    is_prime,
    prime_factorization,
)


def test_prime_table_shape():
    assert len(PRIMES_BELOW_1000) == 168
    assert PRIMES_BELOW_1000[0] == 2
    assert PRIMES_BELOW_1000[-1] == 997
    assert list(PRIMES_BELOW_1000) == sorted(PRIMES_BELOW_1000)
    # puzzle moduli start right after the primes below 100
    assert PRIMES_BELOW_1000[24] == 97
    assert PRIMES_BELOW_1000[25] == 101


@pytest.mark.parametrize("n,expected", [
    (0, True), (1, True), (2, False), (4, True), (15, False),
    (16, True), (99, False), (961, True), (-1, False),
])
def test_is_perfect_square(n, expected):
    assert is_perfect_square(n) is expected


@pytest.mark.parametrize("n,expected", [
    (2, True), (3, True), (1, False), (9, False), (101, True),
    (561, False), (997, True), (999, False),
])
def test_is_prime(n, expected):
    assert is_prime(n) is expected


def test_is_prime_uses_given_table():
    assert is_prime(7, primes=(2, 3, 5, 7))
    assert not is_prime(11, primes=(2, 3, 5, 7))


def test_prime_factorization_exponents():
    assert prime_factorization(360) == {2: 3, 3: 2, 5: 1}
    assert prime_factorization(997) == {997: 1}
    assert prime_factorization(1) == {}


def test_prime_factorization_is_ascending():
    assert list(prime_factorization(2 * 3 * 5 * 7 * 7 * 11)) == [2, 3, 5, 7, 11]


def test_prime_factorization_drops_factors_outside_table():
    # 1009 is prime and above the table
    assert prime_factorization(2 * 1009) == {2: 1}
    assert prime_factorization(12, primes=(2,)) == {2: 2}
