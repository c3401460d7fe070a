"""mermaid-editor - natural language to rendered Mermaid diagrams."""

from .models import (
    Artifact,
    RenderState,
    RenderResult,
    ChatMessage,
    ChatCompletionRequest,
    ChatCompletionResponse,
)

from .errors import (
    ErrorKind,
    DiagramError,
    MissingCredentialError,
    EmptyInputError,
    ServiceError,
    MalformedResponseError,
    EngineLoadFailedError,
    InvalidSyntaxError,
    ExportFailedError,
)

from .config import (
    ModelProvider,
    ModelConfig,
    EngineConfig,
    get_model_config,
    get_engine_config,
    get_completion_url,
    print_config,
)

from .credentials import (
    CredentialStore,
    mask_secret,
    apply_settings_input,
)

from .client import (
    CompletionClient,
    strip_code_fences,
)

from .engine import (
    RenderEngine,
    MermaidEngine,
    LoadState,
    RenderEngineLoader,
    get_default_loader,
)

from .renderer import (
    RenderContainer,
    DiagramRenderer,
    INVALID_SYNTAX_MESSAGE,
)

from .exporter import ExportService

from .session import (
    EditorSession,
    DEFAULT_DIAGRAM,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Models
    "Artifact",
    "RenderState",
    "RenderResult",
    "ChatMessage",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    # Errors
    "ErrorKind",
    "DiagramError",
    "MissingCredentialError",
    "EmptyInputError",
    "ServiceError",
    "MalformedResponseError",
    "EngineLoadFailedError",
    "InvalidSyntaxError",
    "ExportFailedError",
    # Config
    "ModelProvider",
    "ModelConfig",
    "EngineConfig",
    "get_model_config",
    "get_engine_config",
    "get_completion_url",
    "print_config",
    # Credentials
    "CredentialStore",
    "mask_secret",
    "apply_settings_input",
    # Completion
    "CompletionClient",
    "strip_code_fences",
    # Engine
    "RenderEngine",
    "MermaidEngine",
    "LoadState",
    "RenderEngineLoader",
    "get_default_loader",
    # Renderer
    "RenderContainer",
    "DiagramRenderer",
    "INVALID_SYNTAX_MESSAGE",
    # Export
    "ExportService",
    # Session
    "EditorSession",
    "DEFAULT_DIAGRAM",
]
