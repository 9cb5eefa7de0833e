"""Render records into the text blocks interpolated into prompts."""

from oc.models import (
    Candidate,
    CodeContent,
    EvaluationMetrics,
    EvaluationResult,
    MarkdownContent,
    Reflections,
    RequirementsRecord,
    SearchResult,
    WebDSL,
)
from oc.utils.parsing import message_text

NO_REQUIREMENTS = "No requirements analysis available."
NO_EVALUATION = "No previous evaluation results"
NO_REFLECTIONS = "No reflections found."
NO_WEB_DSL = "No web DSL provided."

_REQUIREMENT_LABELS = [
    ("key_features", "Key Features"),
    ("technical_requirements", "Technical Requirements"),
    ("preferences", "Design Preferences"),
    ("considerations", "Considerations"),
    ("ui_components", "UI Components"),
    ("interactions", "Interactions"),
    ("data_visualization", "Data Visualization"),
    ("responsive_layouts", "Responsive Layouts"),
    ("accessibility_features", "Accessibility Features"),
]


def format_requirements_context(requirements: RequirementsRecord | None) -> str:
    """Render the requirements record as a labelled block."""
    if requirements is None:
        return NO_REQUIREMENTS

    lines = [f"Main Goal: {requirements.main_goal}"]
    for field_name, label in _REQUIREMENT_LABELS:
        lines.append(f"{label}: {', '.join(getattr(requirements, field_name))}")
    return "\n".join(lines)


def format_reflections(reflections: Reflections | None, only_content: bool = False) -> str:
    if reflections is None or (not reflections.style_rules and not reflections.content):
        return NO_REFLECTIONS

    lines = []
    if not only_content and reflections.style_rules:
        lines.append("The following is a list of style guidelines previously generated by you:")
        lines.append("<style-guidelines>")
        lines.extend(f"- {rule}" for rule in reflections.style_rules)
        lines.append("</style-guidelines>")
        lines.append("")
    if reflections.content:
        lines.append("The following is a list of memories/facts you previously generated about the user:")
        lines.append("<user-facts>")
        lines.extend(f"- {fact}" for fact in reflections.content)
        lines.append("</user-facts>")
    return "\n".join(lines).strip() or NO_REFLECTIONS


def format_evaluation_feedback(evaluation: EvaluationResult | None) -> str:
    """Summarize the best candidate's sub-scores for the next round's prompt."""
    if evaluation is None:
        return NO_EVALUATION

    comparison = evaluation.details.comparison_for(evaluation.best_article.id)
    if comparison is None:
        return NO_EVALUATION

    lines = [
        f"Content Preferences Score: {comparison.content_preferences.score}",
        f"Style Preferences Score: {comparison.style_preferences.score}",
        "Strengths:",
    ]
    lines.extend(f"- {s}" for s in comparison.overall.strengths)
    lines.append("Weaknesses:")
    lines.extend(f"- {w}" for w in comparison.overall.weaknesses)
    return "\n".join(lines)


def format_metrics(metrics: EvaluationMetrics) -> str:
    lines = []
    for metric in metrics.metrics:
        lines.append(f"- {metric.name} (weight: {metric.weight}): {metric.description}")
        lines.append("  Criteria:")
        lines.extend(f"  * {criterion}" for criterion in metric.criteria)
    return "\n".join(lines)


def format_candidates(candidates: list[Candidate]) -> str:
    return "\n\n---\n\n".join(
        f"ARTICLE ID: {candidate.id}\n\n{candidate.content}" for candidate in candidates
    )


def format_web_dsl(web_dsl: WebDSL | None) -> str:
    if web_dsl is None:
        return NO_WEB_DSL
    return web_dsl.model_dump_json(exclude_none=True)


def format_artifact_content(content: MarkdownContent | CodeContent, shorten: bool = False) -> str:
    """Render an artifact revision with its title (first 500 chars if `shorten`)."""
    body = content.body
    if shorten:
        body = body[:500]
    return f"Title: {content.title}\nArtifact type: {content.type}\nContent: {body}"


def format_messages(messages: list) -> str:
    """Render a message history as <type>...</type> blocks."""
    blocks = []
    for message in messages:
        kind = getattr(message, "type", "unknown")
        blocks.append(f"<{kind}>\n{message_text(message)}\n</{kind}>")
    return "\n\n".join(blocks)


def format_search_results(results: list[SearchResult]) -> str:
    lines = ["Here is some relevant context I found on the web:", ""]
    for i, result in enumerate(results, 1):
        lines.append(f"<search-result index=\"{i}\">")
        if result.title:
            lines.append(f"Title: {result.title}")
        if result.url:
            lines.append(f"URL: {result.url}")
        if result.published_date:
            lines.append(f"Published: {result.published_date}")
        lines.append(result.content)
        lines.append("</search-result>")
        lines.append("")
    return "\n".join(lines).strip()
