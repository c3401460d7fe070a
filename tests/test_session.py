"""Tests for the editor session wiring."""

import pytest

from mermaid_editor.client import CompletionClient
from mermaid_editor.errors import MissingCredentialError, ServiceError
from mermaid_editor.exporter import ExportService
from mermaid_editor.models import RenderState
from mermaid_editor.session import DEFAULT_DIAGRAM, EditorSession


@pytest.fixture
def make_session(store, renderer, model_config, output_dir):
    def _make(transport):
        return EditorSession(
            store=store,
            client=CompletionClient(config=model_config, transport=transport),
            renderer=renderer,
            exporter=ExportService(str(output_dir)),
        )
    return _make


class TestEditorSession:
    def test_default_source(self, make_session, completion_transport):
        session = make_session(completion_transport().transport)
        assert session.source == DEFAULT_DIAGRAM
        assert session.result.state == RenderState.IDLE

    @pytest.mark.asyncio
    async def test_generate_render_export(self, make_session, store, completion_transport,
                                          completion_body, output_dir):
        store.set("sk-test")
        recorder = completion_transport(
            json_body=completion_body("```mermaid\nflowchart TD\nA-->B\n```")
        )
        session = make_session(recorder.transport)

        result = await session.generate("flowchart of login")

        assert session.source == "flowchart TD\nA-->B"
        assert result.state == RenderState.SUCCESS
        path = session.export()
        assert path == output_dir / "diagram.svg"
        assert path.read_text() == result.artifact.svg

    @pytest.mark.asyncio
    async def test_generate_without_key(self, make_session, completion_transport, completion_body):
        recorder = completion_transport(json_body=completion_body("graph TD"))
        session = make_session(recorder.transport)

        with pytest.raises(MissingCredentialError):
            await session.generate("flowchart of login")

        assert session.source == DEFAULT_DIAGRAM
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_failed_generation_keeps_session_usable(self, make_session, store,
                                                          completion_transport):
        store.set("sk-test")
        session = make_session(completion_transport(status_code=500, json_body={}).transport)

        with pytest.raises(ServiceError):
            await session.generate("flowchart of login")

        result = await session.refresh()
        assert result.state == RenderState.SUCCESS
        assert result.artifact.source == DEFAULT_DIAGRAM

    @pytest.mark.asyncio
    async def test_edit_to_invalid_blocks_export(self, make_session, completion_transport, output_dir):
        session = make_session(completion_transport().transport)

        await session.update_source("graph TD\ninvalid")

        assert session.result.state == RenderState.ERROR
        assert session.export() is None
        assert list(output_dir.iterdir()) == []
