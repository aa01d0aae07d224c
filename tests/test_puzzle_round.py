import logging
import random

import pytest

from residue_core.number_theory import PRIMES_BELOW_1000
from residue_core.puzzle_round import (
    MIN_PRIME_INDEX,
    STRIKE_DELAY_SECONDS,
    ModuleLogger,
    generate_values,
    new_state,
    poll_retry,
    press_button,
    retry_due,
    start_round,
)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def state(rng):
    return start_round(new_state(7), rng)


def test_generate_values_stays_in_range(rng):
    allowed = set(PRIMES_BELOW_1000[MIN_PRIME_INDEX:])
    for _ in range(500):
        top, modulus = generate_values(rng)
        assert modulus in allowed
        assert modulus > 100
        assert 1 <= top < modulus


def test_start_round_sets_expected_answer(state):
    top, p = state["top"], state["modulus"]
    assert state["expected"] == (pow(top, (p - 1) // 2, p) == 1)
    assert state["accepting"]
    assert not state["solved"]
    assert state["display"] == (f"{top:3}", f"{p:3}")
    assert state["trace"][0] == f"({top}|{p})"


def test_start_round_writes_module_log(state):
    top, p = state["top"], state["modulus"]
    log = state["log"]
    assert log[0] == f"[Legendre Symbol #7] Generated values {top}, {p}"
    assert log[1] == "[Legendre Symbol #7] One possible solution:"
    assert log[2] == f"[Legendre Symbol #7]   ({top}|{p})"
    verdict = "IS" if state["expected"] else "is NOT"
    assert log[-1].startswith(f"[Legendre Symbol #7] {top} {verdict} a quadratic residue modulo {p}.")


def test_correct_press_disarms(state):
    outcome = press_button(state, state["expected"], now=10.0)
    assert outcome == "solved"
    assert state["solved"]
    assert not state["accepting"]
    assert state["strikes"] == 0
    assert state["log"][-1].endswith("You pressed the correct button!  Module disarmed.")


def test_wrong_press_strikes_and_schedules_retry(state):
    outcome = press_button(state, not state["expected"], now=100.0)
    assert outcome == "strike"
    assert state["strikes"] == 1
    assert not state["accepting"]
    assert state["display"] == ("---", "---")
    assert state["pending_retry_at"] == pytest.approx(100.0 + STRIKE_DELAY_SECONDS)

    assert not retry_due(state, now=100.5)
    assert retry_due(state, now=100.0 + STRIKE_DELAY_SECONDS)


def test_poll_retry_generates_new_round(state, rng):
    press_button(state, not state["expected"], now=100.0)

    assert not poll_retry(state, rng, now=100.1)
    assert not state["accepting"]

    assert poll_retry(state, rng, now=101.0)
    assert state["accepting"]
    assert state["pending_retry_at"] is None
    assert state["strikes"] == 1
    assert state["module_id"] == 7


def test_poll_retry_without_strike_does_nothing(state, rng):
    before = dict(state)
    assert not poll_retry(state, rng, now=1e12)
    assert state["top"] == before["top"]


def test_presses_are_ignored_when_not_accepting(state):
    press_button(state, not state["expected"], now=100.0)
    presses = state["presses"]

    assert press_button(state, True, now=100.1) == "ignored"
    assert state["presses"] == presses
    assert state["strikes"] == 1
    assert state["log"][-1] == '[Legendre Symbol #7] Pressed button "R"'


def test_module_logger_forwards_to_logging(caplog):
    caplog.set_level(logging.INFO, logger="residue_core.puzzle_round")
    log = ModuleLogger(3)
    log("Generated values {}, {}", 5, 101)
    assert log.lines == ["[Legendre Symbol #3] Generated values 5, 101"]
    assert "[Legendre Symbol #3] Generated values 5, 101" in caplog.messages


def test_module_logger_trace_sink_indents():
    log = ModuleLogger(1)
    log.trace_sink("= (5|3)")
    assert log.lines == ["[Legendre Symbol #1]   = (5|3)"]
