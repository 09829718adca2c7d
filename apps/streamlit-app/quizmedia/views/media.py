"""Media display button + floating viewer, and the saved media list."""
import mimetypes
from typing import Optional, Union

import streamlit as st
import streamlit.components.v1 as components

from quizmedia.config import VIEWPORT_HEIGHT, VIEWPORT_WIDTH
from quizmedia.models import MediaDescriptor, Size
from quizmedia.state import add_media_item, get_viewer


def render_media_display(media: Union[MediaDescriptor, dict, None], label: Optional[str] = None):
    """
    'View Media' button that opens the viewer for one media record.
    Records without a path render nothing at all.
    """
    if not media:
        return
    viewer = get_viewer(media, label=label)
    if not viewer.renderable:
        return

    key = viewer.media.path
    if st.button(viewer.button_label, key=f"open_media_{key}", type="tertiary"):
        viewer.open(Size(width=VIEWPORT_WIDTH, height=VIEWPORT_HEIGHT))

    if not viewer.is_open:
        return

    measured = viewer.measured_size()
    with st.container(border=True):
        title_col, close_col = st.columns([8, 1])
        with title_col:
            st.markdown(f"**{viewer.title}**")
        with close_col:
            if st.button("✕", key=f"close_media_{key}", help="Close media viewer"):
                viewer.close()
                st.rerun()
        components.html(viewer.render_document(), width=int(measured.width), height=int(measured.height))


def render_media_library():
    """Sidebar list of saved links / files, each with its own viewer button."""
    st.header("Media")
    with st.form("add_media_form", clear_on_submit=True):
        path = st.text_input("URL or file path")
        name = st.text_input("Display name (optional)")
        is_website = st.checkbox("Embed as a website")
        submitted = st.form_submit_button("Add")
    if submitted:
        if not path.strip():
            st.warning("Enter a URL or path first.")
        else:
            mimetype = "text/url" if is_website else mimetypes.guess_type(path)[0]
            added = add_media_item(MediaDescriptor(path=path.strip(), mimetype=mimetype, originalname=name or None))
            if not added:
                st.info("That link is already in your media list.")

    if not st.session_state.media_items:
        st.info("No media saved yet. Add a link, video or document above.")
        return
    for item in st.session_state.media_items:
        render_media_display(item, label=item.originalname or item.path)
