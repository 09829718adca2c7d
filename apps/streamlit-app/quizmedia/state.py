"""Helpers to manage Streamlit session state in one place."""
from typing import Optional, Union

import streamlit as st

from quizmedia.media import MediaViewer
from quizmedia.models import ChatFailure, ChatResult, MediaDescriptor


def ensure_base_state():
    """Ensure the keys every view relies on are present."""
    if "questions" not in st.session_state:
        st.session_state.questions = []  # List[Question] from the last generation
    if "explanations" not in st.session_state:
        st.session_state.explanations = {}  # question id -> latest explanation text
    if "uploader_key" not in st.session_state:
        st.session_state.uploader_key = 0  # used to reset the file_uploader widget
    if "viewers" not in st.session_state:
        st.session_state.viewers = {}  # media path -> MediaViewer
    if "media_items" not in st.session_state:
        st.session_state.media_items = []  # [MediaDescriptor] saved by the user
    ensure_chat_state()


def ensure_chat_state():
    """
    Chat state: the message list rendered in the UI and the server thread handle.
    thread_id stays None until the backend hands one out.
    """
    if "messages" not in st.session_state:
        st.session_state.messages = []  # [{"role": "user"|"assistant", "content": str}]
    if "thread_id" not in st.session_state:
        st.session_state.thread_id = None


def reset_chat_state():
    """Start a fresh conversation; the next message opens a new server thread."""
    st.session_state.messages = []
    st.session_state.thread_id = None


def record_chat_result(result: ChatResult):
    """
    Keep the conversation handle stable across failures: a failed call echoes
    the thread id we sent, so it is only replaced when the backend returns one.
    A failed prompt is dropped so the next history never has two user turns in a row.
    """
    if result.thread_id:
        st.session_state.thread_id = result.thread_id
    if isinstance(result, ChatFailure):
        messages = st.session_state.messages
        if messages and messages[-1]["role"] == "user":
            messages.pop()
        return
    st.session_state.messages.append({"role": "assistant", "content": result.response})


def store_questions(questions):
    st.session_state.questions = list(questions)
    st.session_state.explanations = {}


def get_viewer(media: Union[MediaDescriptor, dict], label: Optional[str] = None) -> MediaViewer:
    """
    One viewer per media path so geometry survives Streamlit reruns while open.
    Geometry is still reset every time the viewer is opened.
    """
    if isinstance(media, dict):
        media = MediaDescriptor.model_validate(media)
    key = media.path or ""
    viewer = st.session_state.viewers.get(key)
    if viewer is None:
        viewer = MediaViewer(media, label=label)
        st.session_state.viewers[key] = viewer
    return viewer


def add_media_item(media: MediaDescriptor) -> bool:
    """Save a media record unless its path is already listed. Returns True when added."""
    items = st.session_state.media_items
    if any(item.path == media.path for item in items):
        return False
    items.append(media)
    return True
