"""Pydantic models for render state and the completion wire format."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import ErrorKind


SVG_MEDIA_TYPE = "image/svg+xml"


class Artifact(BaseModel):
    """Rendered SVG markup, tied to the source that produced it."""
    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Diagram source that was rendered")
    svg: str = Field(..., description="Scalable vector markup")
    media_type: str = SVG_MEDIA_TYPE


class RenderState(str, Enum):
    """Preview pane states."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class RenderResult(BaseModel):
    """Exactly one of idle, loading, success(artifact) or error(message)."""
    model_config = ConfigDict(frozen=True)

    state: RenderState = RenderState.IDLE
    artifact: Optional[Artifact] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @model_validator(mode="after")
    def _check_variant(self) -> "RenderResult":
        if (self.artifact is not None) != (self.state == RenderState.SUCCESS):
            raise ValueError("artifact must be set exactly when state is success")
        if (self.error is not None) != (self.state == RenderState.ERROR):
            raise ValueError("error must be set exactly when state is error")
        return self

    @classmethod
    def idle(cls) -> "RenderResult":
        return cls(state=RenderState.IDLE)

    @classmethod
    def loading(cls) -> "RenderResult":
        return cls(state=RenderState.LOADING)

    @classmethod
    def success(cls, artifact: Artifact) -> "RenderResult":
        return cls(state=RenderState.SUCCESS, artifact=artifact)

    @classmethod
    def failure(cls, message: str, kind: ErrorKind = ErrorKind.INVALID_SYNTAX) -> "RenderResult":
        return cls(state=RenderState.ERROR, error=message, error_kind=kind)

    @property
    def is_success(self) -> bool:
        return self.state == RenderState.SUCCESS


class ChatMessage(BaseModel):
    """A message in a chat completion exchange."""
    role: str = Field(..., description="'system', 'user' or 'assistant'")
    content: str


class ChatCompletionRequest(BaseModel):
    """Body posted to the chat completions endpoint."""
    model: str
    messages: list[ChatMessage]
    temperature: float = 0.7


class Choice(BaseModel):
    message: ChatMessage


class ChatCompletionResponse(BaseModel):
    """The subset of a completion response we read."""
    choices: list[Choice] = Field(..., min_length=1)

    @property
    def content(self) -> str:
        return self.choices[0].message.content
