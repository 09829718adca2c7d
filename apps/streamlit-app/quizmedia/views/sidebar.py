"""Sidebar rendering: chat thread controls and saved media."""
import streamlit as st

from quizmedia.state import reset_chat_state
from quizmedia.views.media import render_media_library


def render_sidebar():
    st.header("Chat")
    thread_id = st.session_state.get("thread_id")
    if thread_id:
        st.caption(f"Thread: {thread_id}")
    else:
        st.caption("No conversation yet. Your first message starts one.")
    if st.button("+ New chat", use_container_width=True):
        reset_chat_state()
        st.rerun()

    st.markdown("---")
    render_media_library()
