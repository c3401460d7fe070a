"""Render state machine: Mermaid source -> RenderResult."""

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .engine import RenderEngineLoader, get_default_loader
from .errors import EngineLoadFailedError, ErrorKind, InvalidSyntaxError
from .models import Artifact, RenderResult

logger = logging.getLogger(__name__)

INVALID_SYNTAX_MESSAGE = "Invalid diagram syntax. Please check your code."
ENGINE_LOAD_FAILED_MESSAGE = "Loading the Mermaid renderer failed."

_request_counter = itertools.count(1)


def new_element_id() -> str:
    """Unique element id for one render invocation."""
    return f"mermaid-{int(time.time() * 1000)}-{next(_request_counter)}"


class RenderContainer:
    """The shared preview area a renderer draws into."""

    def __init__(self):
        self.element_id: Optional[str] = None
        self.content: str = ""

    def clear(self):
        self.element_id = None
        self.content = ""

    def mount(self, element_id: str):
        """Reserve a fresh element for an in-flight render."""
        self.element_id = element_id
        self.content = ""

    def attach(self, element_id: str, svg: str):
        if self.element_id == element_id:
            self.content = svg

    @property
    def is_empty(self) -> bool:
        return not self.content


@dataclass(frozen=True)
class RenderOutcome:
    """Result of one engine invocation, tagged with the request it belongs to."""
    element_id: str
    result: RenderResult


class DiagramRenderer:
    """Owns the RenderResult for one preview.

    Only the most recent `render()` call may commit its outcome; results of
    superseded calls are dropped when they arrive.
    """

    def __init__(
        self,
        loader: Optional[RenderEngineLoader] = None,
        container: Optional[RenderContainer] = None,
        on_change: Optional[Callable[[RenderResult], None]] = None,
    ):
        self.loader = loader or get_default_loader()
        self.container = container or RenderContainer()
        self.on_change = on_change
        self._result = RenderResult.idle()
        self._latest_id: Optional[str] = None

    @property
    def result(self) -> RenderResult:
        return self._result

    def _set_result(self, result: RenderResult):
        self._result = result
        if self.on_change is not None:
            self.on_change(result)

    def _commit(self, outcome: RenderOutcome) -> bool:
        if outcome.element_id != self._latest_id:
            logger.debug("Discarding stale render %s (%s)", outcome.element_id, outcome.result.state.value)
            return False
        if not outcome.result.is_success:
            self.container.clear()
        self._set_result(outcome.result)
        return True

    async def _invoke(self, element_id: str, source: str) -> RenderOutcome:
        try:
            engine = await self.loader.ensure_ready()
        except EngineLoadFailedError:
            return RenderOutcome(
                element_id,
                RenderResult.failure(ENGINE_LOAD_FAILED_MESSAGE, ErrorKind.ENGINE_LOAD_FAILED),
            )

        if element_id == self._latest_id:
            self.container.mount(element_id)
        try:
            svg = await engine.render(element_id, source)
        except InvalidSyntaxError as e:
            logger.warning("Mermaid rendering error: %s", e.detail or e)
            return RenderOutcome(element_id, RenderResult.failure(INVALID_SYNTAX_MESSAGE))

        self.container.attach(element_id, svg)
        return RenderOutcome(element_id, RenderResult.success(Artifact(source=source, svg=svg)))

    async def render(self, source: str) -> RenderResult:
        """Render `source` and return the committed result.

        Blank source resets to idle without touching the engine.
        """
        if not source or not source.strip():
            self._latest_id = None
            self.container.clear()
            if self._result != RenderResult.idle():
                self._set_result(RenderResult.idle())
            return self._result

        element_id = new_element_id()
        self._latest_id = element_id
        self.container.clear()
        self._set_result(RenderResult.loading())

        outcome = await self._invoke(element_id, source)
        self._commit(outcome)
        return self._result
