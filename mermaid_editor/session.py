"""Editor session: the state shared by prompt, source editor and preview."""

import logging
from pathlib import Path
from typing import Optional

from .client import CompletionClient
from .credentials import CredentialStore
from .exporter import ExportService
from .models import RenderResult
from .renderer import DiagramRenderer

logger = logging.getLogger(__name__)


DEFAULT_DIAGRAM = (
    "graph TD\n"
    "  A[Start] --> B{Decision}\n"
    "  B -->|Yes| C[Do Something]\n"
    "  B -->|No| D[Do Nothing]\n"
    "  C --> E[End]\n"
    "  D --> E"
)


class EditorSession:
    """Owns the current diagram source and wires the pipeline together."""

    def __init__(
        self,
        store: Optional[CredentialStore] = None,
        client: Optional[CompletionClient] = None,
        renderer: Optional[DiagramRenderer] = None,
        exporter: Optional[ExportService] = None,
        source: str = DEFAULT_DIAGRAM,
    ):
        self.store = store or CredentialStore()
        self.client = client or CompletionClient()
        self.renderer = renderer or DiagramRenderer()
        self.exporter = exporter or ExportService()
        self.source = source

    @property
    def result(self) -> RenderResult:
        return self.renderer.result

    async def generate(self, prompt: str) -> RenderResult:
        """Generate new source from `prompt`, then render it.

        Generation errors propagate and leave the current source untouched.
        """
        source = await self.client.generate(prompt, self.store.get())
        logger.info("Diagram generated (%d chars)", len(source))
        return await self.update_source(source)

    async def update_source(self, source: str) -> RenderResult:
        self.source = source
        return await self.renderer.render(source)

    async def refresh(self) -> RenderResult:
        return await self.renderer.render(self.source)

    def export(self) -> Optional[Path]:
        return self.exporter.export_svg(self.renderer.result)
