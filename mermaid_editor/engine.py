"""Mermaid rendering engine and its one-time, shared loader.

The engine is Mermaid running in a headless Chromium page. Loading it
(browser start, script fetch, `mermaid.initialize`) is slow, so a single
`RenderEngineLoader` performs it at most once at a time and caches the
ready engine for the rest of the process.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .config import EngineConfig, get_engine_config
from .errors import EngineLoadFailedError, InvalidSyntaxError

logger = logging.getLogger(__name__)


HOST_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body><div id="preview"></div></body>
</html>"""

RENDER_SCRIPT = """async ([id, source]) => {
    const { svg } = await window.mermaid.render(id, source);
    return svg;
}"""


class RenderEngine(Protocol):
    """What the renderer needs from a loaded engine."""

    async def render(self, element_id: str, source: str) -> str:
        """Render `source` into SVG markup, raising InvalidSyntaxError."""
        ...

    async def close(self) -> None:
        ...


class MermaidEngine:
    """Mermaid loaded into a Playwright page."""

    def __init__(self, playwright, browser, page):
        self._playwright = playwright
        self._browser = browser
        self._page = page

    @classmethod
    async def launch(cls, config: EngineConfig) -> "MermaidEngine":
        """Start Chromium, fetch the Mermaid script and initialize it."""
        playwright = await async_playwright().start()
        browser = None
        try:
            browser = await playwright.chromium.launch(headless=config.headless)
            page = await browser.new_page()
            await page.set_content(HOST_PAGE)
            await page.add_script_tag(url=config.script_url)
            await page.evaluate(
                "options => window.mermaid.initialize(options)",
                config.initialize_options(),
            )
        except BaseException:
            if browser is not None:
                await browser.close()
            await playwright.stop()
            raise
        logger.info("Mermaid engine ready (%s)", config.script_url)
        return cls(playwright, browser, page)

    async def render(self, element_id: str, source: str) -> str:
        try:
            return await self._page.evaluate(RENDER_SCRIPT, [element_id, source])
        except PlaywrightError as e:
            raise InvalidSyntaxError(detail=str(e)) from e

    async def close(self) -> None:
        await self._browser.close()
        await self._playwright.stop()


def _retrieve_exception(task: asyncio.Future):
    # Waiters may all be cancelled; mark a failed load as retrieved
    if not task.cancelled():
        task.exception()


class LoadState(str, Enum):
    """Engine lifecycle."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


EngineFactory = Callable[[EngineConfig], Awaitable[RenderEngine]]


class RenderEngineLoader:
    """Lazily loads one engine and shares it between renderers.

    Concurrent `ensure_ready()` calls while loading all await the same
    in-flight load. A failed load can be retried by calling again; a ready
    engine is returned immediately from then on.
    """

    def __init__(
        self,
        factory: Optional[EngineFactory] = None,
        config: Optional[EngineConfig] = None,
    ):
        self._factory = factory or MermaidEngine.launch
        self._config = config
        self._state = LoadState.UNINITIALIZED
        self._engine: Optional[RenderEngine] = None
        self._pending: Optional[asyncio.Future] = None
        self.load_count = 0

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def engine(self) -> Optional[RenderEngine]:
        return self._engine

    async def ensure_ready(self) -> RenderEngine:
        """Return the loaded engine, loading it first if needed.

        Raises EngineLoadFailedError if the load this call waited on failed.
        """
        if self._state == LoadState.READY:
            return self._engine
        if self._pending is None:
            self._state = LoadState.LOADING
            self._pending = asyncio.ensure_future(self._load())
            self._pending.add_done_callback(_retrieve_exception)
        # Shielded so a cancelled waiter does not abort the shared load
        return await asyncio.shield(self._pending)

    async def _load(self) -> RenderEngine:
        self.load_count += 1
        config = self._config or get_engine_config()
        try:
            engine = await self._factory(config)
        except Exception as e:
            logger.error("Loading Mermaid renderer failed: %s", e)
            self._state = LoadState.FAILED
            self._pending = None
            raise EngineLoadFailedError() from e
        self._engine = engine
        self._state = LoadState.READY
        self._pending = None
        return engine

    async def close(self):
        """Shut down the engine and return to uninitialized.

        A load still in flight is waited for so its engine is closed too.
        """
        pending = self._pending
        if pending is not None:
            try:
                await asyncio.shield(pending)
            except EngineLoadFailedError:
                # Already logged by _load; nothing to shut down
                pass
        engine = self._engine
        self._engine = None
        self._state = LoadState.UNINITIALIZED
        if engine is not None:
            await engine.close()


_default_loader: Optional[RenderEngineLoader] = None


def get_default_loader() -> RenderEngineLoader:
    """Get or create the process-wide loader."""
    global _default_loader
    if _default_loader is None:
        _default_loader = RenderEngineLoader()
    return _default_loader
