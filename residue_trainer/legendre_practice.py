# legendre_practice.py
# TutorAssist-style skill module: Legendre Symbol puzzle (quadratic residues)

import time

import streamlit as st
from streamlit import session_state as ss

from residue_core.legendre import Symbol, symbol_latex, trace_line_latex
from residue_core.puzzle_round import (
    new_state,
    poll_retry,
    press_button,
    retry_due,
    start_round,
)
from residue_core.rounds_db import (
    get_module_stats,
    next_module_id,
    record_press,
    record_round,
    resolve_round,
)

# ==============================
# 🧠 Session Engine
# ==============================

def start_legendre_module():
    state = new_state(next_module_id())
    start_round(state)
    _store_round(state)
    ss.legendre = state
    ss.legendre_show_solution = False

def _store_round(state):
    state["round_id"] = record_round(
        state["module_id"],
        state["top"],
        state["modulus"],
        state["expected"],
        state["trace"],
    )

def handle_press(answer: bool):
    state = ss.legendre
    round_id = state["round_id"]

    outcome = press_button(state, answer)
    if outcome == "ignored":
        return

    record_press(round_id, "R" if answer else "N", outcome == "solved")
    resolve_round(round_id, outcome)

# ==============================
# 🖥️ UI
# ==============================

def _show_module_log(state):
    with st.expander("📜 Module log"):
        st.code("\n".join(state["log"]) or "(empty)", language=None)

def _show_solution(state):
    for i, line in enumerate(state["trace"]):
        if i == 0:
            st.latex(r"\Large " + trace_line_latex(line))
        elif line.startswith("="):
            st.latex(trace_line_latex(line))
        else:
            st.caption(line.strip())

def legendre_practice():

    st.markdown("""
    <style>
    .block-container {
        padding-top: 1.0rem;
    }
    </style>
    """, unsafe_allow_html=True)

    st.markdown("## 🧮 Legendre Symbol")

    if "legendre" not in ss:
        ss.legendre = None

    if "legendre_show_solution" not in ss:
        ss.legendre_show_solution = False

    # ==============================
    # 🟢 Setup Screen
    # ==============================
    if ss.legendre is None:
        st.markdown(
            "Decide whether the top number is a **quadratic residue** modulo the bottom prime.  \n"
            "Press **R** if it is, **N** if it is not. A wrong press is a strike and new numbers are generated."
        )
        if st.button("🚀 Start Module", use_container_width=True):
            start_legendre_module()
            st.rerun()
        return

    state = ss.legendre

    # ==============================
    # ⏳ Strike delay
    # ==============================
    if state["pending_retry_at"] is not None:
        if retry_due(state):
            poll_retry(state)
            _store_round(state)
            ss.legendre_show_solution = False
            st.rerun()
            return

        st.error("💥 Strike! Generating new numbers...")
        st.markdown("### `---`\n### `---`")
        time.sleep(max(0.0, state["pending_retry_at"] - time.time()))
        st.rerun()
        return

    # ==============================
    # 📊 Disarmed Screen
    # ==============================
    if state["solved"]:
        stats = get_module_stats(state["module_id"])

        st.success("✅ Module disarmed!")
        st.latex(r"\LARGE " + symbol_latex(Symbol(state["top"], state["modulus"])))
        st.markdown(
            f"**Answer:** {'R (residue)' if state['expected'] else 'N (non-residue)'}  \n"
            f"**Rounds played:** {stats['rounds']}  \n"
            f"**Strikes:** {state['strikes']}"
        )

        with st.expander("📋 Derivation", expanded=True):
            _show_solution(state)

        _show_module_log(state)

        if st.button("🔁 New Module"):
            ss.legendre = None
            st.rerun()
        return

    # ==============================
    # ❓ Question Screen
    # ==============================
    left, right = st.columns([3, 1.3])

    with left:
        top_text, bottom_text = state["display"]
        st.markdown(f"### Module #{state['module_id']}")
        st.latex(r"\Huge " + symbol_latex(Symbol(state["top"], state["modulus"])))
        st.caption(f"Displays: `{top_text}` over `{bottom_text}`")

        st.markdown(f"💥 Strikes: **{state['strikes']}**")

        col1, col2 = st.columns([1, 1])

        with col1:
            if st.button("R — residue", use_container_width=True):
                handle_press(True)
                st.rerun()

        with col2:
            if st.button("N — non-residue", use_container_width=True):
                handle_press(False)
                st.rerun()

    with right:
        st.markdown("### 💡 Solution")

        if ss.legendre_show_solution:
            _show_solution(state)
        else:
            st.caption("Solution hidden.")

        st.divider()

        if st.button("👁️ Toggle solution"):
            ss.legendre_show_solution = not ss.legendre_show_solution
            st.rerun()

    _show_module_log(state)
