"""Chat with the AI tutor."""
import streamlit as st

from quizmedia.api import send_chat_message
from quizmedia.state import record_chat_result


def render_chat_step():
    """Render the conversation and send new messages on the current thread."""
    st.subheader("Chat with the AI tutor")
    st.caption("Ask anything about your study material. The conversation continues until you start a new chat.")

    for message in st.session_state.messages:
        with st.chat_message(message["role"]):
            st.markdown(message["content"])

    if prompt := st.chat_input("Ask the tutor..."):
        # History is everything said before this prompt
        history = list(st.session_state.messages)
        st.session_state.messages.append({"role": "user", "content": prompt})
        with st.chat_message("user"):
            st.markdown(prompt)

        result = send_chat_message(
            prompt,
            history=history or None,
            thread_id=st.session_state.thread_id,
        )
        record_chat_result(result)

        with st.chat_message("assistant"):
            if result.success:
                st.markdown(result.response)
            else:
                st.error(f"Error contacting the AI tutor: {result.message}")
