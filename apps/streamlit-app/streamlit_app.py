import logging

import streamlit as st

from quizmedia.state import ensure_base_state
from quizmedia.views.chat import render_chat_step
from quizmedia.views.quiz import render_generate_step, render_questions_step
from quizmedia.views.sidebar import render_sidebar

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# ---------- Layout + main app ----------

st.set_page_config(
    page_title="AI Study Assistant",
    page_icon=":books:",
    layout="wide",
)

ensure_base_state()

# ---------- Sidebar: chat thread + media ----------
with st.sidebar:
    render_sidebar()

st.title("AI Study Assistant")

quiz_tab, chat_tab = st.tabs(["Practice questions", "Tutor chat"])

# ---------- Steps ----------
with quiz_tab:
    render_generate_step()
    render_questions_step()

with chat_tab:
    render_chat_step()
