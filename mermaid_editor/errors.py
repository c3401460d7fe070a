"""Error taxonomy for the generation and rendering pipeline."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure conditions surfaced to the user."""
    MISSING_CREDENTIAL = "missing_credential"
    EMPTY_INPUT = "empty_input"
    SERVICE_ERROR = "service_error"
    MALFORMED_RESPONSE = "malformed_response"
    ENGINE_LOAD_FAILED = "engine_load_failed"
    INVALID_SYNTAX = "invalid_syntax"
    EXPORT_FAILED = "export_failed"


class DiagramError(Exception):
    """Base error. `title` and `message` are safe to show to the user."""

    kind: ErrorKind
    title: str = "Error"
    default_message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class MissingCredentialError(DiagramError):
    kind = ErrorKind.MISSING_CREDENTIAL
    title = "API Key Missing"
    default_message = "Please add your OpenAI API key in settings"


class EmptyInputError(DiagramError):
    kind = ErrorKind.EMPTY_INPUT
    title = "Empty Prompt"
    default_message = "Please enter a description for your diagram"


class ServiceError(DiagramError):
    """Completion service answered with a non-success status (or not at all)."""
    kind = ErrorKind.SERVICE_ERROR
    title = "Generation Failed"

    def __init__(self, status: Optional[int] = None, message: Optional[str] = None):
        self.status = status
        if message is None:
            message = (
                f"API request failed with status {status}"
                if status is not None else "API request failed"
            )
        super().__init__(message)


class MalformedResponseError(DiagramError):
    kind = ErrorKind.MALFORMED_RESPONSE
    title = "Generation Failed"
    default_message = "The completion service returned an unexpected response"


class EngineLoadFailedError(DiagramError):
    kind = ErrorKind.ENGINE_LOAD_FAILED
    title = "Renderer Unavailable"
    default_message = "Loading the Mermaid renderer failed"


class InvalidSyntaxError(DiagramError):
    """Raised by the engine; `detail` carries the technical engine message."""
    kind = ErrorKind.INVALID_SYNTAX
    title = "Invalid Syntax"
    default_message = "Invalid diagram syntax. Please check your code."

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__()


class ExportFailedError(DiagramError):
    kind = ErrorKind.EXPORT_FAILED
    title = "Export Failed"
    default_message = "The diagram could not be written"
