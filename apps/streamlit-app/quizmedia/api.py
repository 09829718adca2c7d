"""
HTTP helpers for talking to the AI inference backend.

Every helper returns a result model from quizmedia.models instead of raising:
transport problems and backend rejections both come back as a Failure so the
views only ever render one shape. Arguments are validated before any request
is made; a malformed request is a caller bug and raises pydantic.ValidationError.
"""
import logging
from contextlib import contextmanager
from typing import Any, Iterable, List, Optional, Tuple, Union

import httpx
from pydantic import ValidationError

from quizmedia.config import AI_API_TIMEOUT, AI_BACKEND_URL, AI_UPLOAD_TIMEOUT
from quizmedia.models import (
    ChatFailure,
    ChatReply,
    ChatRequest,
    ChatResult,
    ChatTurn,
    Explanation,
    ExplanationRequest,
    ExplanationResult,
    Failure,
    GenerateFromTextRequest,
    QuestionBatch,
    QuestionsResult,
)

logger = logging.getLogger(__name__)

DOCUMENT_QUESTIONS_PATH = "/api/ai/generate-questions-from-document"
TEXT_QUESTIONS_PATH = "/api/ai/generate-questions-from-text"
EXPLAIN_CHOICE_PATH = "/api/ai/explain-answer-choice"
CHAT_PATH = "/api/ai-chat"

QUESTIONS_ERROR = "An unexpected error occurred with the AI service."
QUESTIONS_UNREACHABLE = "Failed to connect to the AI service or an unexpected error occurred."
EXPLAIN_ERROR = "An unexpected error with the AI explanation service."
EXPLAIN_UNREACHABLE = "Failed to connect to the AI explanation service or an unexpected error occurred."
CHAT_ERROR = "An unexpected error occurred with the AI chat service."
CHAT_UNREACHABLE = "Failed to connect to the AI chat service or an unexpected error occurred."


@contextmanager
def _backend_client(client: Optional[httpx.Client], timeout: float):
    """Use the caller's client as-is, or open a short-lived one for this call."""
    if client is not None:
        yield client
        return
    with httpx.Client(base_url=AI_BACKEND_URL, timeout=timeout) as new_client:
        yield new_client


def _read_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _detail_text(detail: Any) -> str:
    # FastAPI validation errors arrive as a list of {"loc", "msg", "type"} dicts
    if isinstance(detail, list):
        parts = [item.get("msg", str(item)) if isinstance(item, dict) else str(item) for item in detail]
        return "; ".join(parts)
    return str(detail)


def error_message(body: Any, fallback: str) -> str:
    """
    Message for a failed call: the body's "detail" wins, then its "message",
    then the operation's generic fallback.
    """
    if not isinstance(body, dict):
        return fallback
    if body.get("detail"):
        return _detail_text(body["detail"])
    if body.get("message"):
        return str(body["message"])
    return fallback


def _post(
    path: str,
    fallback: str,
    unreachable: str,
    client: Optional[httpx.Client] = None,
    timeout: float = AI_API_TIMEOUT,
    **request_kwargs,
) -> Tuple[Any, Optional[str]]:
    """
    Single POST attempt against the backend.
    Returns (decoded_body, None) on a 2xx JSON response, otherwise (None, failure_message).
    """
    try:
        with _backend_client(client, timeout) as http:
            r = http.post(path, **request_kwargs)
            r.raise_for_status()
            return r.json(), None
    except httpx.HTTPStatusError as he:
        message = error_message(_read_json(he.response), fallback)
        logger.warning("AI backend rejected %s (HTTP %s): %s", path, he.response.status_code, message)
        return None, message
    except httpx.RequestError as exc:
        logger.error("Could not reach AI backend for %s: %s", path, exc)
        return None, unreachable
    except ValueError:
        logger.warning("AI backend sent a non-JSON body for %s", path)
        return None, fallback


def _file_part(file) -> Tuple[str, bytes, str]:
    """(filename, bytes, content type) tuple for one multipart `files` entry."""
    return (file.name, file.getvalue(), file.type or "application/octet-stream")


def _questions_result(path: str, body: Any) -> QuestionsResult:
    if not isinstance(body, dict) or not body.get("success"):
        message = error_message(body, QUESTIONS_ERROR)
        logger.warning("AI backend reported failure for %s: %s", path, message)
        return Failure(message=message)
    try:
        return QuestionBatch.model_validate(body)
    except ValidationError as ve:
        logger.warning("Malformed question batch from %s: %s", path, ve)
        return Failure(message=QUESTIONS_ERROR)


def generate_questions_from_document(
    files: Iterable,
    user_instructions: Optional[str] = None,
    literal_mode: bool = False,
    client: Optional[httpx.Client] = None,
) -> QuestionsResult:
    """
    Multipart upload of one or more documents; the backend reads them and
    writes multiple-choice questions.
    `files` are UploadedFile-like objects (name, type, getvalue()).
    """
    parts = [("files", _file_part(f)) for f in files]
    form = {"literal_mode": "true" if literal_mode else "false"}
    if user_instructions:
        form["user_instructions"] = user_instructions

    body, error = _post(
        DOCUMENT_QUESTIONS_PATH,
        QUESTIONS_ERROR,
        QUESTIONS_UNREACHABLE,
        client=client,
        timeout=AI_UPLOAD_TIMEOUT,
        data=form,
        files=parts,
    )
    if error is not None:
        return Failure(message=error)
    return _questions_result(DOCUMENT_QUESTIONS_PATH, body)


def generate_questions_from_text(
    raw_text: str,
    user_instructions: Optional[str] = None,
    literal_mode: bool = False,
    client: Optional[httpx.Client] = None,
) -> QuestionsResult:
    """Same as generate_questions_from_document, but for pasted text sent as JSON."""
    payload = GenerateFromTextRequest(
        raw_text=raw_text,
        user_instructions=user_instructions,
        literal_mode=literal_mode,
    ).model_dump(exclude_none=True)

    body, error = _post(TEXT_QUESTIONS_PATH, QUESTIONS_ERROR, QUESTIONS_UNREACHABLE, client=client, json=payload)
    if error is not None:
        return Failure(message=error)
    return _questions_result(TEXT_QUESTIONS_PATH, body)


def explain_answer_choice(
    request: Union[ExplanationRequest, dict],
    client: Optional[httpx.Client] = None,
) -> ExplanationResult:
    """
    Ask the backend why an option is right or wrong, in reply to the user's query.
    A dict `request` may use the wire keys (questionText, ...) or the field names;
    one that does not validate raises ValidationError without calling the backend.
    """
    if not isinstance(request, ExplanationRequest):
        request = ExplanationRequest.model_validate(request)
    payload = request.model_dump(by_alias=True, exclude_none=True)

    body, error = _post(EXPLAIN_CHOICE_PATH, EXPLAIN_ERROR, EXPLAIN_UNREACHABLE, client=client, json=payload)
    if error is not None:
        return Failure(message=error)
    if not isinstance(body, dict) or not body.get("success"):
        message = error_message(body, EXPLAIN_ERROR)
        logger.warning("AI backend reported failure for %s: %s", EXPLAIN_CHOICE_PATH, message)
        return Failure(message=message)
    try:
        return Explanation.model_validate(body)
    except ValidationError as ve:
        logger.warning("Malformed explanation from %s: %s", EXPLAIN_CHOICE_PATH, ve)
        return Failure(message=EXPLAIN_ERROR)


def send_chat_message(
    message: str,
    history: Optional[List[Union[ChatTurn, dict]]] = None,
    thread_id: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> ChatResult:
    """
    Send one chat message. Leave thread_id empty to start a new conversation;
    the reply carries the thread id to use next time.
    On failure the caller's thread_id is echoed back (or "" if there was none).
    """
    payload = ChatRequest(message=message, history=history, thread_id=thread_id).model_dump(exclude_none=True)

    body, error = _post(CHAT_PATH, CHAT_ERROR, CHAT_UNREACHABLE, client=client, json=payload)
    if error is None:
        # The chat endpoint has no success flag: any 2xx {response, thread_id} body counts
        try:
            return ChatReply.model_validate(body)
        except ValidationError as ve:
            logger.warning("Malformed chat reply from %s: %s", CHAT_PATH, ve)
            error = CHAT_ERROR
    return ChatFailure(message=error, thread_id=thread_id or "")
