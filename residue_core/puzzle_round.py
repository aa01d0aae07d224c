"""
Round state for the Legendre symbol puzzle.

A round is a plain dict so it can live in st.session_state. The UI calls
start_round once, press_button on every click, and poll_retry on every
rerun; a wrong press blanks the display and schedules a fresh pair of
numbers STRIKE_DELAY_SECONDS later.
"""

import logging
import random
import time

from residue_core.legendre import evaluate
from residue_core.number_theory import PRIMES_BELOW_1000

logger = logging.getLogger(__name__)

# There are 25 primes below 100, so skip those
MIN_PRIME_INDEX = 25
STRIKE_DELAY_SECONDS = 0.75
LOG_PREFIX_FORMAT = "[Legendre Symbol #{}] "

class ModuleLogger:
    """Prefixes each line with the module id and keeps a copy for display."""

    def __init__(self, module_id: int, lines=None):
        self.module_id = module_id
        self.prefix = LOG_PREFIX_FORMAT.format(module_id)
        self.lines = lines if lines is not None else []

    def __call__(self, message: str, *args):
        if args:
            message = message.format(*args)
        line = self.prefix + message
        self.lines.append(line)
        logger.info(line)

    def trace_sink(self, line: str):
        self("  " + line)

def new_state(module_id: int) -> dict:
    return {
        "module_id": module_id,
        "top": None,
        "modulus": None,
        "expected": None,
        "trace": [],
        "accepting": False,
        "solved": False,
        "strikes": 0,
        "presses": 0,
        "pending_retry_at": None,
        "display": ("---", "---"),
        "round_id": None,
        "log": [],
    }

def generate_values(rng=random, primes=PRIMES_BELOW_1000):
    modulus = rng.choice(primes[MIN_PRIME_INDEX:])
    top = rng.randint(1, modulus - 1)
    return top, modulus

def start_round(state: dict, rng=random, primes=PRIMES_BELOW_1000) -> dict:
    log = ModuleLogger(state["module_id"], state["log"])

    top, modulus = generate_values(rng, primes)
    state["top"] = top
    state["modulus"] = modulus
    state["display"] = (f"{top:3}", f"{modulus:3}")

    log("Generated values {}, {}", top, modulus)
    log("One possible solution:")
    result = evaluate(top, modulus, log=log.trace_sink, primes=primes)

    state["expected"] = result.is_residue
    state["trace"] = result.trace

    if result.is_residue:
        log('{} IS a quadratic residue modulo {}.  Expected press: "R"', top, modulus)
    else:
        log('{} is NOT a quadratic residue modulo {}.  Expected press: "N"', top, modulus)

    state["accepting"] = True
    state["solved"] = False
    state["pending_retry_at"] = None
    state["round_id"] = None
    return state

def press_button(state: dict, answer: bool, now=None) -> str:
    """
    Handle a press of "R" (answer=True) or "N" (answer=False).
    Returns "solved", "strike" or "ignored".
    """
    log = ModuleLogger(state["module_id"], state["log"])
    log('Pressed button "{}"', "R" if answer else "N")

    if not state["accepting"]:
        return "ignored"

    state["presses"] += 1

    if answer == state["expected"]:
        state["accepting"] = False
        state["solved"] = True
        log("You pressed the correct button!  Module disarmed.")
        return "solved"

    log("Strike!  You pressed the wrong button.  Generating new numbers...")
    now = time.time() if now is None else now
    state["strikes"] += 1
    state["accepting"] = False
    state["display"] = ("---", "---")
    state["pending_retry_at"] = now + STRIKE_DELAY_SECONDS
    return "strike"

def retry_due(state: dict, now=None) -> bool:
    if state["pending_retry_at"] is None:
        return False
    now = time.time() if now is None else now
    return now >= state["pending_retry_at"]

def poll_retry(state: dict, rng=random, now=None, primes=PRIMES_BELOW_1000) -> bool:
    """Start the next round if a strike's delay has run out."""
    if not retry_due(state, now):
        return False
    start_round(state, rng, primes)
    return True
