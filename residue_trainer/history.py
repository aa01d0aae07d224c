import streamlit as st

from residue_core.legendre import trace_line_latex
from residue_core.rounds_db import get_round_by_id, get_round_history

st.title("📚 Round History")

# ----------------------------
# Filters
# ----------------------------
st.subheader("🔎 Filter")

outcome_labels = {
    "All": "All",
    "Solved": "solved",
    "Strike": "strike",
    "Unanswered": "open",
}

f_outcome = st.selectbox("Outcome", list(outcome_labels.keys()))

df = get_round_history(outcome_labels[f_outcome])

if df.empty:
    st.info("No rounds recorded yet.")
    st.stop()

st.dataframe(df, hide_index=True, use_container_width=True)

st.divider()

# ----------------------------
# Build selector
# ----------------------------
label_map = {}
labels = []

for r in df.itertuples(index=False):
    label = f"#{r.id}  —  ({r.top_value}|{r.modulus}) • Module {r.module_id} • {r.outcome or 'unanswered'}"
    labels.append(label)
    label_map[label] = r.id

choice = st.selectbox("Choose a round:", labels, index=None, placeholder="Choose a round")

if not choice:
    st.info("👆 Select a round to see its derivation.")
    st.stop()

item = get_round_by_id(label_map[choice])

if item is None:
    st.error("Round not found.")
    st.stop()

st.subheader(f"({item['top']}|{item['modulus']})")
st.caption(
    f"Module {item['module_id']} • Expected {'R' if item['expected'] else 'N'} • "
    f"{item['created_at']}"
)

for i, line in enumerate(item["trace"]):
    if i == 0 or line.startswith("="):
        st.latex(trace_line_latex(line))
    else:
        st.caption(line.strip())

if item["presses"]:
    st.markdown("**Presses**")
    for p in item["presses"]:
        icon = "✅" if p["correct"] else "❌"
        st.markdown(f"{icon} `{p['pressed']}` at {p['created_at']}")

with st.expander("Plain-text trace"):
    st.code("\n".join(item["trace"]), language=None)
