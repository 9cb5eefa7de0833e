"""Best-effort on-disk audit of refinement runs.

Layout under `audit_dir`:

    rewrite_artifact_set_<timestamp>_<uuid>/
        iteration_<n>/
            artifact_<i>_score_<s>/artifact_<i>_score_<s>.html (+ rating.json)
            original_artifact.txt
            user_prompt.json, system_prompt.txt
            evaluation_results.json, web_dsl.json
        iterations_<n>_<id>_score_<s>.html, rating.json, user_prompt.json

Nothing here may fail a request: every error is printed and swallowed.
"""

import asyncio
import json
import sys
import uuid
from datetime import datetime
from pathlib import Path

from oc.config import get_config
from oc.models import Candidate, EvaluationResult, WebDSL
from oc.utils.parsing import strip_html_fences


def new_run_dirname() -> str:
    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    return f"rewrite_artifact_set_{timestamp}_{uuid.uuid4()}"


def _audit_root() -> Path | None:
    config = get_config()
    if not config.get("audit_enabled", False):
        return None
    return Path(config.get("audit_dir", "./temp_artifacts"))


def _score_for(evaluation: EvaluationResult | None, candidate_id: str) -> tuple[float, dict | None]:
    if evaluation is None:
        return 0, None
    comparison = evaluation.details.comparison_for(candidate_id)
    if comparison is None:
        return 0, None
    return comparison.overall.total_score, comparison.model_dump()


def _format_score(score: float) -> str:
    return str(int(score)) if float(score).is_integer() else str(score)


def _write_iteration(
    iteration_dir: Path,
    candidates: list[Candidate],
    evaluation: EvaluationResult | None,
    user_prompt: str,
    system_prompt: str,
    original_artifact: str,
    web_dsl: WebDSL | None,
) -> None:
    iteration_dir.mkdir(parents=True, exist_ok=True)

    for i, candidate in enumerate(candidates):
        score, rating = _score_for(evaluation, candidate.id)
        stem = f"artifact_{i}_score_{_format_score(score)}"
        candidate_dir = iteration_dir / stem
        candidate_dir.mkdir(parents=True, exist_ok=True)
        (candidate_dir / f"{stem}.html").write_text(strip_html_fences(candidate.content), encoding="utf-8")
        if rating:
            (candidate_dir / "rating.json").write_text(json.dumps(rating, indent=2), encoding="utf-8")

    (iteration_dir / "original_artifact.txt").write_text(original_artifact, encoding="utf-8")
    (iteration_dir / "user_prompt.json").write_text(json.dumps(user_prompt, indent=2), encoding="utf-8")
    (iteration_dir / "system_prompt.txt").write_text(system_prompt, encoding="utf-8")
    if evaluation is not None:
        (iteration_dir / "evaluation_results.json").write_text(
            evaluation.model_dump_json(indent=2), encoding="utf-8"
        )
    if web_dsl is not None:
        (iteration_dir / "web_dsl.json").write_text(web_dsl.model_dump_json(indent=2), encoding="utf-8")


async def save_artifact_set(
    run_dirname: str,
    iteration: int,
    candidates: list[Candidate],
    evaluation: EvaluationResult | None,
    user_prompt: str,
    system_prompt: str,
    original_artifact: str,
    web_dsl: WebDSL | None,
) -> Path | None:
    """Persist one refinement round. Returns the iteration directory, or None."""
    root = _audit_root()
    if root is None:
        return None
    iteration_dir = root / run_dirname / f"iteration_{iteration}"
    try:
        await asyncio.to_thread(
            _write_iteration,
            iteration_dir,
            candidates,
            evaluation,
            user_prompt,
            system_prompt,
            original_artifact,
            web_dsl,
        )
    except (OSError, TypeError, ValueError) as exc:
        print(f"[OC] Error saving artifacts to file: {exc!r}", file=sys.stderr)
        return None
    print(f"[OC] Saved iteration {iteration} candidates to {iteration_dir}", file=sys.stderr)
    return iteration_dir


def _write_best(run_dir: Path, filename: str, content: str, rating: dict | None, user_prompt: str) -> Path:
    run_dir.mkdir(parents=True, exist_ok=True)
    path = run_dir / filename
    path.write_text(content, encoding="utf-8")
    if rating:
        (run_dir / "rating.json").write_text(json.dumps(rating, indent=2), encoding="utf-8")
    (run_dir / "user_prompt.json").write_text(json.dumps(user_prompt, indent=2), encoding="utf-8")
    return path


async def save_best_artifact(
    run_dirname: str,
    evaluation: EvaluationResult | None,
    rounds: int,
    user_prompt: str,
) -> Path | None:
    """Persist the winning candidate of a run. No-op without an evaluation."""
    root = _audit_root()
    if root is None or evaluation is None:
        return None
    best = evaluation.best_article
    score, rating = _score_for(evaluation, best.id)
    filename = f"iterations_{rounds}_{best.id}_score_{_format_score(score)}.html"
    try:
        return await asyncio.to_thread(
            _write_best,
            root / run_dirname,
            filename,
            strip_html_fences(best.content),
            rating,
            user_prompt,
        )
    except (OSError, TypeError, ValueError) as exc:
        print(f"[OC] Error saving best artifact to file: {exc!r}", file=sys.stderr)
        return None
