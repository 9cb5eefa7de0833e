"""Tests for oc.agents.highlights: targeted edits of a selection."""

import asyncio

import pytest

from oc.agents.highlights import update_artifact, update_highlighted_text
from oc.models import CodeHighlight, TextHighlight

from tests.fakes import FakeChatModel


class TestUpdateHighlightedText:
    def _highlight(self, artifact, block="Our plans are simple."):
        return TextHighlight(
            full_markdown=artifact.current_content().full_markdown,
            markdown_block=block,
            selected_text="simple",
        )

    def test_block_spliced_into_markdown(self, fake_models, base_state, run_config, markdown_artifact):
        base_state.update(artifact=markdown_artifact, highlighted_text=self._highlight(markdown_artifact))
        fake_models["generation"] = FakeChatModel(responses=["Our plans are transparent."])

        result = asyncio.run(update_highlighted_text(base_state, run_config))

        current = result["artifact"].current_content()
        assert current.index == 2
        assert current.full_markdown == "# Pricing\n\nOur plans are transparent.\n\nContact sales for more."

    def test_selection_in_prompt(self, fake_models, base_state, run_config, markdown_artifact):
        base_state.update(artifact=markdown_artifact, highlighted_text=self._highlight(markdown_artifact))
        fake_models["generation"] = FakeChatModel(responses=["x"])

        asyncio.run(update_highlighted_text(base_state, run_config))

        system, human = fake_models["generation"].calls[0]
        assert "simple" in system["content"]
        assert "Our plans are simple." in system["content"]
        assert human.type == "human"

    def test_falls_back_to_client_markdown(self, fake_models, base_state, run_config, markdown_artifact):
        highlight = TextHighlight(
            full_markdown="Intro\n\nOld block\n\nOutro",
            markdown_block="Old block",
            selected_text="Old",
        )
        base_state.update(artifact=markdown_artifact, highlighted_text=highlight)
        fake_models["generation"] = FakeChatModel(responses=["New block"])

        result = asyncio.run(update_highlighted_text(base_state, run_config))

        assert result["artifact"].current_content().full_markdown == "Intro\n\nNew block\n\nOutro"

    def test_code_artifact_rejected(self, fake_models, base_state, run_config, code_artifact):
        base_state.update(
            artifact=code_artifact,
            highlighted_text=TextHighlight(full_markdown="a", markdown_block="a", selected_text="a"),
        )

        with pytest.raises(ValueError, match="not markdown"):
            asyncio.run(update_highlighted_text(base_state, run_config))


class TestUpdateArtifact:
    def test_slice_replaced(self, fake_models, base_state, run_config, code_artifact):
        code = code_artifact.current_content().code
        start = code.index("a - b")
        base_state.update(
            artifact=code_artifact,
            highlighted_code=CodeHighlight(start_char_index=start, end_char_index=start + len("a - b")),
        )
        fake_models["generation"] = FakeChatModel(responses=["a + b"])

        result = asyncio.run(update_artifact(base_state, run_config))

        current = result["artifact"].current_content()
        assert current.code == code.replace("a - b", "a + b")
        assert current.language == "python"
        assert result["artifact"].contents[0].code == code

    def test_context_window_in_prompt(self, fake_models, base_state, run_config, code_artifact):
        code = code_artifact.current_content().code
        start = code.index("a - b")
        base_state.update(
            artifact=code_artifact,
            highlighted_code=CodeHighlight(start_char_index=start, end_char_index=start + 5),
        )
        fake_models["generation"] = FakeChatModel(responses=["a + b"])

        asyncio.run(update_artifact(base_state, run_config))

        system = fake_models["generation"].calls[0][0]["content"]
        assert "def add(a, b):" in system
        assert "def mul(a, b):" in system

    def test_range_past_end_raises(self, fake_models, base_state, run_config, code_artifact):
        base_state.update(
            artifact=code_artifact,
            highlighted_code=CodeHighlight(start_char_index=0, end_char_index=10_000),
        )

        with pytest.raises(ValueError, match="outside the artifact"):
            asyncio.run(update_artifact(base_state, run_config))

    def test_inverted_range_raises(self, fake_models, base_state, run_config, code_artifact):
        base_state.update(
            artifact=code_artifact,
            highlighted_code=CodeHighlight(start_char_index=8, end_char_index=2),
        )

        with pytest.raises(ValueError):
            asyncio.run(update_artifact(base_state, run_config))
