import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]   # points to the repo root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import streamlit as st
from residue_core.rounds_db import init_rounds_db

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(message)s")

st.set_page_config(page_title="Residue Trainer", page_icon="🧮", layout="wide")

pages = {
    "Puzzles": [
        st.Page("puzzle.py", title="Legendre Symbol"),
    ],
    "Review": [
        st.Page("history.py", title="Round History"),
    ],
}

init_rounds_db()

pg = st.navigation(pages)
pg.run()
