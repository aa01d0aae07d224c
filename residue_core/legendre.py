"""
Legendre symbol evaluation with a human-readable derivation.

Each generation rewrites every pending symbol once, using the first rule
that matches:

    1. (s²|p)                 -> 1
    2. a is a perfect square  -> (s²|p)
    3. (2|p)                  -> ±1 by p mod 8
    4. (-1|p)                 -> ±1 by p mod 4
    5. a ≡ -1 (mod p)         -> (-1|p)
    6. a > p                  -> (a mod p|p)
    7. a prime                -> (p|a), negated when a ≡ p ≡ 3 (mod 4)
    8. a composite            -> (square part|p) × (q|p) for each odd-power q

A -1 produced by rules 3, 4 or 7 is not carried as a symbol. It flips a
pending sign that is written at the front of every later line.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional, Tuple

from residue_core.number_theory import (
    PRIMES_BELOW_1000,
    integer_sqrt,
    is_perfect_square,
    is_prime,
    prime_factorization,
)

TOKEN_SEPARATOR = " × "

@dataclass(frozen=True)
class Symbol:
    top: int
    modulus: int
    squared_top: bool = False

    def __str__(self) -> str:
        return render_symbol(self)

class Rewrite(NamedTuple):
    tokens: List[str]
    successors: List[Symbol]
    flips_sign: bool
    notes: List[str]

class Evaluation(NamedTuple):
    is_residue: bool
    trace: List[str]

def render_symbol(symbol: Symbol) -> str:
    if symbol.squared_top:
        return f"({integer_sqrt(symbol.top)}²|{symbol.modulus})"
    return f"({symbol.top}|{symbol.modulus})"

# ==============================
# 🔁 Rewrite rules
# ==============================

def _single(new_symbol: Symbol) -> Rewrite:
    return Rewrite([render_symbol(new_symbol)], [new_symbol], False, [])

def rewrite_symbol(symbol: Symbol, primes=PRIMES_BELOW_1000) -> Rewrite:
    a, p = symbol.top, symbol.modulus

    if symbol.squared_top:
        # (a²|p) is always 1
        return Rewrite(["1"], [], False, [])

    if is_perfect_square(a):
        # Show the squared form first, it collapses next generation
        return _single(Symbol(a, p, squared_top=True))

    if a == 2:
        p_mod_8 = p % 8
        result = 1 if p_mod_8 in (1, 7) else -1
        note = f"  {p} mod 8 = {p_mod_8}, so (2|{p}) = {result}"
        return Rewrite([str(result)], [], result == -1, [note])

    if a == -1:
        p_mod_4 = p % 4
        result = 1 if p_mod_4 == 1 else -1
        note = f"  {p} mod 4 = {p_mod_4}, so (-1|{p}) = {result}"
        return Rewrite([str(result)], [], result == -1, [note])

    if a % p == p - 1:
        return _single(Symbol(-1, p))

    if a > p:
        return _single(Symbol(a % p, p))

    if is_prime(a, primes):
        # Quadratic reciprocity
        flip = a % 4 == 3 and p % 4 == 3
        swapped = Symbol(p, a)
        return Rewrite([("-" if flip else "") + render_symbol(swapped)], [swapped], flip, [])

    # Composite top: split off the square part, keep odd-power primes
    squared_term = 1
    square_free_primes = []
    for q, exp in prime_factorization(a, primes).items():
        if exp >= 2:
            squared_term *= q ** (exp - exp % 2)
        if exp % 2 == 1:
            square_free_primes.append(q)

    successors = []
    if squared_term != 1:
        successors.append(Symbol(squared_term, p, squared_top=True))
    successors.extend(Symbol(q, p) for q in square_free_primes)

    return Rewrite([render_symbol(s) for s in successors], successors, False, [])

def reduce_generation(
    symbols: List[Symbol], negated: bool, primes=PRIMES_BELOW_1000
) -> Tuple[List[str], List[Symbol], bool, List[str]]:
    """
    Rewrite one generation.

    Returns (tokens, next_symbols, negated, notes). The incoming sign is
    written as a leading "-1" token; sign flips from this generation only
    show up on the next line.
    """
    tokens = ["-1"] if negated else []
    next_symbols = []
    notes = []

    for symbol in symbols:
        rewrite = rewrite_symbol(symbol, primes)
        tokens.extend(rewrite.tokens)
        next_symbols.extend(rewrite.successors)
        notes.extend(rewrite.notes)
        if rewrite.flips_sign:
            negated = not negated

    return tokens, next_symbols, negated, notes

# ==============================
# ✅ Entry point
# ==============================

def check_domain(top: int, modulus: int, primes=PRIMES_BELOW_1000):
    if modulus == 2 or not is_prime(modulus, primes):
        raise ValueError(f"Modulus must be an odd prime below {primes[-1] + 1}, got {modulus}")
    if not 0 < top < modulus:
        raise ValueError(f"Top value must be between 1 and {modulus - 1}, got {top}")

def evaluate(
    top: int,
    modulus: int,
    log: Optional[Callable[[str], None]] = None,
    primes=PRIMES_BELOW_1000,
    strict: bool = True,
) -> Evaluation:
    """
    Decide whether `top` is a quadratic residue modulo `modulus`.

    Every trace line is also passed to `log` as soon as it is produced.
    With strict=False the inputs are not checked, and a modulus or factor
    outside the prime table gives a wrong answer instead of an error.
    """
    if strict:
        check_domain(top, modulus, primes)

    trace = []

    def emit(line: str):
        trace.append(line)
        if log is not None:
            log(line)

    current = [Symbol(top, modulus)]
    emit(render_symbol(current[0]))

    negated = False
    while current:
        tokens, current, negated, notes = reduce_generation(current, negated, primes)
        for note in notes:
            emit(note)
        emit("= " + TOKEN_SEPARATOR.join(tokens))

        if not current and len(tokens) > 1:
            # One final multiply to get a single answer
            emit("= " + ("-1" if negated else "1"))

    return Evaluation(not negated, trace)

# ==============================
# 🖋️ LaTeX rendering
# ==============================

_SYMBOL_RE = re.compile(r"(-?)\((-?\d+)(²?)\|(\d+)\)")

def symbol_latex(symbol: Symbol) -> str:
    if symbol.squared_top:
        top = f"{integer_sqrt(symbol.top)}^{{2}}"
    else:
        top = str(symbol.top)
    return rf"\left(\frac{{{top}}}{{{symbol.modulus}}}\right)"

def trace_line_latex(line: str) -> str:
    """
    Typeset a trace line (header, "= ..." step or note) for st.latex.
    Examples:
      = -(7|3) × (2²|11)  ->  = -\\left(\\frac{7}{3}\\right) \\times ...
    """
    def repl(m: re.Match) -> str:
        sign, top, squared, modulus = m.groups()
        symbol = Symbol(int(top) ** 2 if squared else int(top), int(modulus), bool(squared))
        return sign + symbol_latex(symbol)

    s = _SYMBOL_RE.sub(repl, line.strip())
    s = s.replace(TOKEN_SEPARATOR, r" \times ")
    s = s.replace(", so ", r",\ \text{so}\ ")
    s = s.replace(" mod ", r" \bmod ")
    return s
