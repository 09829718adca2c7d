"""Question generation (documents or pasted text) + answer explanations."""
import streamlit as st

from quizmedia.api import (
    explain_answer_choice,
    generate_questions_from_document,
    generate_questions_from_text,
)
from quizmedia.models import ExplanationRequest
from quizmedia.state import store_questions


def render_generate_step():
    """Render the two ways of feeding source material to the question generator."""
    st.subheader("Step 1 - Give the AI some study material")
    st.caption("Upload documents or paste text. Literal mode keeps questions close to the exact wording.")

    tabs = st.tabs(["From documents", "From text"])

    # ----- Documents tab -----
    with tabs[0]:
        uploaded_files = st.file_uploader(
            "Upload documents",
            type=["pdf", "docx", "doc", "txt", "pptx"],
            accept_multiple_files=True,
            key=f"doc_uploader_{st.session_state.get('uploader_key', 0)}",
        )
        doc_instructions = st.text_area("Instructions (optional)", key="doc_instructions")
        doc_literal = st.checkbox("Literal mode", key="doc_literal")
        if st.button("Generate questions", disabled=not uploaded_files, use_container_width=True, key="doc_generate"):
            with st.spinner("Reading documents and writing questions..."):
                result = generate_questions_from_document(
                    uploaded_files,
                    user_instructions=doc_instructions or None,
                    literal_mode=doc_literal,
                )
            _handle_questions_result(result)

    # ----- Text tab -----
    with tabs[1]:
        raw_text = st.text_area("Source text", height=200, key="raw_text")
        text_instructions = st.text_area("Instructions (optional)", key="text_instructions")
        text_literal = st.checkbox("Literal mode", key="text_literal")
        if st.button("Generate questions", disabled=not raw_text.strip(), use_container_width=True, key="text_generate"):
            with st.spinner("Writing questions..."):
                result = generate_questions_from_text(
                    raw_text,
                    user_instructions=text_instructions or None,
                    literal_mode=text_literal,
                )
            _handle_questions_result(result)


def _handle_questions_result(result):
    if not result.success:
        st.error(f"Question generation failed: {result.message}")
        return
    store_questions(result.data)
    # Bump uploader_key so the next batch starts from an empty uploader
    st.session_state.uploader_key = st.session_state.get("uploader_key", 0) + 1
    st.toast(f"Generated {len(result.data)} questions", icon="\U00002705")
    st.rerun()


def render_questions_step():
    """Render generated questions with a per-question 'ask why' box."""
    questions = st.session_state.get("questions", [])
    if not questions:
        st.info("No questions yet. Generate some from a document or pasted text.")
        return

    st.subheader("Step 2 - Review the questions")
    for number, question in enumerate(questions, start=1):
        with st.container(border=True):
            st.markdown(f"**{number}. {question.question_text}**")
            for index, option in enumerate(question.options):
                marker = "-> " if index == question.correct_answer else ""
                st.write(f"{marker}{chr(65 + index)}. {option}")
            if question.explanation:
                with st.expander("Explanation"):
                    st.markdown(question.explanation)
            render_explain_form(question)


def render_explain_form(question):
    """Ask the backend about one option of a question."""
    answer = st.session_state.explanations.get(question.id)
    if answer:
        st.markdown(answer)

    with st.form(f"explain_{question.id}", clear_on_submit=True):
        target = st.selectbox(
            "Option to ask about",
            options=["(whole question)"] + question.options,
            key=f"explain_target_{question.id}",
        )
        query = st.text_input("Your question", key=f"explain_query_{question.id}")
        submitted = st.form_submit_button("Ask the AI")
    if not submitted:
        return
    if not query.strip():
        st.warning("Type a question first.")
        return

    request = ExplanationRequest(
        question_text=question.question_text,
        options=question.options,
        correct_answer_index=question.correct_answer,
        original_explanation=question.explanation or None,
        user_query=query,
        target_option_text=None if target == "(whole question)" else target,
    )
    with st.spinner("Thinking..."):
        result = explain_answer_choice(request)
    if result.success:
        st.session_state.explanations[question.id] = result.explanation
        st.rerun()
    else:
        st.error(f"Could not get an explanation: {result.message}")
