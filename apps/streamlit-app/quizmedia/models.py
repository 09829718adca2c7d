"""Pydantic models shared across the Streamlit app."""
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---- Outbound payloads ----


class FileBlob(BaseModel):
    """
    In-memory file for multipart uploads.
    Exposes the same surface as Streamlit's UploadedFile (name, type, getvalue()).
    """
    name: str
    content: bytes
    type: Optional[str] = None

    def getvalue(self) -> bytes:
        return self.content


class GenerateFromTextRequest(BaseModel):
    raw_text: str
    user_instructions: Optional[str] = None
    literal_mode: bool = False


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """
    Outgoing payload for /api/ai-chat:
        {
            "message": "... user message ...",
            "history": [{"role": "user", "content": "..."}] (optional),
            "thread_id": "..." (optional; omitted to start a new thread)
        }
    """
    message: str
    history: Optional[List[ChatTurn]] = None
    thread_id: Optional[str] = None


class ExplanationRequest(BaseModel):
    """The backend expects camelCase keys for this endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    question_text: str = Field(alias="questionText")
    options: List[str]
    correct_answer_index: int = Field(alias="correctAnswerIndex")
    original_explanation: Optional[str] = Field(default=None, alias="originalExplanation")
    user_query: str = Field(alias="userQuery")
    target_option_text: Optional[str] = Field(default=None, alias="targetOptionText")


# ---- Normalized results ----


class Question(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    question_text: str = Field(alias="questionText")
    options: List[str]
    correct_answer: int = Field(alias="correctAnswer")
    explanation: str = ""


class Result(BaseModel):
    """Base for every client result; `kind` tells success from failure."""
    kind: Literal["success", "failure"]

    @property
    def success(self) -> bool:
        return self.kind == "success"


class Failure(Result):
    kind: Literal["failure"] = "failure"
    message: str


class QuestionBatch(Result):
    kind: Literal["success"] = "success"
    data: List[Question]
    message: Optional[str] = None


class Explanation(Result):
    kind: Literal["success"] = "success"
    explanation: str
    message: Optional[str] = None


class ChatReply(Result):
    kind: Literal["success"] = "success"
    response: str
    thread_id: str


class ChatFailure(Failure):
    # thread_id echoes the caller's thread so the conversation handle survives errors
    response: str = ""
    thread_id: str = ""


QuestionsResult = Union[QuestionBatch, Failure]
ExplanationResult = Union[Explanation, Failure]
ChatResult = Union[ChatReply, ChatFailure]


# ---- Media viewer ----


class MediaDescriptor(BaseModel):
    """Media record as stored by the main app (uploaded file or saved link)."""
    path: Optional[str] = None
    mimetype: Optional[str] = None
    type: Optional[str] = None
    originalname: Optional[str] = None


class Position(BaseModel):
    x: float = 0
    y: float = 0


class Size(BaseModel):
    width: float
    height: float


class PointerEvent(BaseModel):
    """
    Document-level pointer event.
    `target` names the part of the viewer window under the pointer:
    "chrome", "content", "button" or "resize-handle" (None when unknown).
    """
    type: Literal["pointerdown", "pointermove", "pointerup"]
    client_x: float
    client_y: float
    target: Optional[str] = None
