"""Tests for oc.agents.refinement: running best, stop rules, validation pass."""

import asyncio

from oc.agents.evaluator import EVALUATION_TOOL, METRICS_TOOL
from oc.agents.refinement import build_meta_prompt, generate_candidates, run_refinement_loop, validate_and_fix
from oc.models import ArtifactMeta, WebDSL
from oc.utils.llm_logger import RequestContext

from tests.fakes import METRICS_ARGS, FakeChatModel, evaluation_args, tool_response


def _page(round_number, article):
    return f"<html>r{round_number}a{article}</html>"


def _script(fake_models, rounds, validated="VALIDATED"):
    """Script one model conversation per round.

    `rounds` items are (best_id, score), or None for a round whose scoring
    fails on every attempt.
    """
    streams, metrics, scoring = [], [], []
    for n, outcome in enumerate(rounds, 1):
        streams += [[_page(n, i)] for i in (1, 2, 3)]
        metrics.append(tool_response(METRICS_TOOL, METRICS_ARGS))
        if outcome is None:
            scoring += [RuntimeError("evaluator down")] * 6
        else:
            scoring.append(tool_response(EVALUATION_TOOL, evaluation_args(*outcome)))
    fake_models["generation"] = FakeChatModel(responses=metrics, streams=streams)
    fake_models["evaluator"] = FakeChatModel(responses=scoring)
    fake_models["small"] = FakeChatModel(responses=[validated])


def _run(state, config, human, **kwargs):
    return asyncio.run(run_refinement_loop(
        state,
        config,
        store=None,
        recent_human_message=human,
        original_content="",
        reflections="No reflections found.",
        requirements_context="No requirements analysis available.",
        web_search_results="No web search results found.",
        **kwargs,
    ))


def _validated_input(fake_models):
    """Content the validation pass was asked to format."""
    return fake_models["small"].calls[0][1]["content"]


class TestStopRules:
    def test_stops_at_acceptable_score(self, fake_models, base_state, run_config, human_message):
        _script(fake_models, [("article_2", 95)])

        outcome = _run(base_state, run_config, human_message)

        assert outcome.rounds == 1
        assert outcome.content == "VALIDATED"
        assert outcome.evaluation.score == 95
        assert _validated_input(fake_models) == _page(1, 2)

    def test_runs_to_iteration_cap(self, fake_models, base_state, run_config, human_message):
        _script(fake_models, [("article_1", 50 + n) for n in range(5)])

        outcome = _run(base_state, run_config, human_message)

        assert outcome.rounds == 5
        assert len(fake_models["generation"].stream_calls) == 15
        assert _validated_input(fake_models) == _page(5, 1)

    def test_threshold_reached_mid_run(self, fake_models, base_state, run_config, human_message):
        _script(fake_models, [("article_1", 60), ("article_3", 92), ("article_1", 99)])

        outcome = _run(base_state, run_config, human_message)

        assert outcome.rounds == 2
        assert outcome.evaluation.best_article.content == _page(2, 3)


class TestRunningBest:
    def test_tie_goes_to_newer_round(self, fake_models, mock_config, base_state, run_config, human_message):
        mock_config["refinement"]["max_iterations"] = 2
        _script(fake_models, [("article_1", 70), ("article_2", 70)])

        outcome = _run(base_state, run_config, human_message)

        assert _validated_input(fake_models) == _page(2, 2)

    def test_lower_score_does_not_replace_best(self, fake_models, mock_config, base_state, run_config, human_message):
        mock_config["refinement"]["max_iterations"] = 2
        _script(fake_models, [("article_3", 80), ("article_1", 40)])

        outcome = _run(base_state, run_config, human_message)

        assert outcome.evaluation.score == 80
        assert _validated_input(fake_models) == _page(1, 3)

    def test_missing_evaluation_keeps_best(self, fake_models, mock_config, base_state, run_config, human_message):
        mock_config["refinement"]["max_iterations"] = 2
        _script(fake_models, [("article_2", 75), None])

        outcome = _run(base_state, run_config, human_message)

        assert outcome.evaluation.score == 75
        assert _validated_input(fake_models) == _page(1, 2)

    def test_unknown_best_id_keeps_best(self, fake_models, mock_config, base_state, run_config, human_message):
        mock_config["refinement"]["max_iterations"] = 2
        _script(fake_models, [("article_2", 80), None])
        fake_models["evaluator"].responses[1:] = [
            tool_response(EVALUATION_TOOL, evaluation_args("article_9", 95))
        ] * 6

        outcome = _run(base_state, run_config, human_message)

        assert outcome.rounds == 2
        assert outcome.evaluation.best_article.id == "article_2"
        assert outcome.evaluation.score == 80
        assert _validated_input(fake_models) == _page(1, 2)

    def test_failed_generation_round_scores_zero(self, fake_models, mock_config, base_state, run_config, human_message):
        mock_config["refinement"]["max_iterations"] = 2
        fake_models["generation"] = FakeChatModel(
            responses=[tool_response(METRICS_TOOL, METRICS_ARGS)],
            streams=[
                [_page(1, 1)], RuntimeError("stream dropped"), [_page(1, 3)],
                [_page(2, 1)], [_page(2, 2)], [_page(2, 3)],
            ],
        )
        fake_models["evaluator"] = FakeChatModel(
            responses=[tool_response(EVALUATION_TOOL, evaluation_args("article_1", 65))]
        )
        fake_models["small"] = FakeChatModel(responses=["VALIDATED"])

        outcome = _run(base_state, run_config, human_message)

        # Round 1 never reached the evaluator.
        assert len(fake_models["evaluator"].calls) == 1
        assert outcome.rounds == 2
        assert _validated_input(fake_models) == _page(2, 1)

    def test_degenerate_run_returns_empty(self, fake_models, mock_config, base_state, run_config, human_message):
        mock_config["refinement"]["max_iterations"] = 2
        _script(fake_models, [None, None])

        outcome = _run(base_state, run_config, human_message)

        assert outcome.content == ""
        assert outcome.evaluation is None
        assert fake_models["small"].calls == []


class TestRoundPrompts:
    def test_second_round_refines_best(self, fake_models, mock_config, base_state, run_config, human_message):
        mock_config["refinement"]["max_iterations"] = 2
        _script(fake_models, [("article_2", 70), ("article_1", 72)])

        _run(base_state, run_config, human_message)

        round_two_system = fake_models["generation"].stream_calls[3][0]["content"]
        assert _page(1, 2) in round_two_system
        assert "Content Preferences Score: 70" in round_two_system

    def test_web_dsl_only_in_first_round(self, fake_models, mock_config, base_state, run_config, human_message):
        mock_config["refinement"]["max_iterations"] = 2
        base_state["web_dsl"] = WebDSL(description="Pricing blueprint")
        _script(fake_models, [("article_1", 50), ("article_1", 55)])

        _run(base_state, run_config, human_message)

        calls = fake_models["generation"].stream_calls
        assert "Pricing blueprint" in calls[0][0]["content"]
        assert "Pricing blueprint" not in calls[3][0]["content"]

    def test_custom_system_prompt_prefixed(self, fake_models, base_state, run_config, human_message):
        run_config["configurable"]["system_prompt"] = "Always use purple."
        _script(fake_models, [("article_1", 95)])

        _run(base_state, run_config, human_message)

        system = fake_models["generation"].stream_calls[0][0]["content"]
        assert system.startswith("Always use purple.\n")

    def test_user_message_sent_last(self, fake_models, base_state, run_config, human_message):
        _script(fake_models, [("article_1", 95)])

        _run(base_state, run_config, human_message)

        assert fake_models["generation"].stream_calls[0][-1] is human_message


class TestGenerateCandidates:
    def test_ids_follow_generation_order(self, fake_models):
        llm = FakeChatModel(streams=[["a"], ["b", "b"], ["c"]])

        candidates = asyncio.run(generate_candidates(llm, [], 1, RequestContext()))

        assert [(c.id, c.content) for c in candidates] == [
            ("article_1", "a"), ("article_2", "bb"), ("article_3", "c")
        ]

    def test_count_override(self, fake_models):
        llm = FakeChatModel(streams=[["a"], ["b"]])

        candidates = asyncio.run(generate_candidates(llm, [], 1, RequestContext(), count=2))

        assert len(candidates) == 2


class TestValidateAndFix:
    def test_empty_content_skips_model(self, fake_models):
        assert asyncio.run(validate_and_fix("", RequestContext())) == ""
        assert "small" not in fake_models

    def test_failure_keeps_raw_content(self, fake_models):
        fake_models["small"] = FakeChatModel(responses=[RuntimeError("boom")])

        assert asyncio.run(validate_and_fix("<html></html>", RequestContext())) == "<html></html>"

    def test_returns_formatted_content(self, fake_models):
        fake_models["small"] = FakeChatModel(responses=["```html\n<html></html>\n```"])

        result = asyncio.run(validate_and_fix("<html></html>", RequestContext()))

        assert result.startswith("```html")


class TestBuildMetaPrompt:
    def test_title_only_for_text(self):
        prompt = build_meta_prompt(ArtifactMeta(type="text", title="Plans"))
        assert "Plans" in prompt

    def test_code_type_omits_title(self):
        prompt = build_meta_prompt(ArtifactMeta(type="code", title="Plans", language="python"))
        assert "code" in prompt
        assert "Plans" not in prompt
