"""Domain records shared by every node: artifacts, requirements, DSL, evaluation.

Artifacts are append-only. Every edit produces a new `Artifact` carrying one
more revision; existing revisions are frozen and never rewritten.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# ---------------------------------------------------------------------------
# Artifact
# ---------------------------------------------------------------------------


class MarkdownContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1)
    type: Literal["text"] = "text"
    title: str = ""
    full_markdown: str = ""

    @property
    def body(self) -> str:
        return self.full_markdown

    def with_body(self, body: str, index: int) -> "MarkdownContent":
        return self.model_copy(update={"full_markdown": body, "index": index})


class CodeContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1)
    type: Literal["code"] = "code"
    title: str = ""
    language: str = "other"
    code: str = ""

    @property
    def body(self) -> str:
        return self.code

    def with_body(self, body: str, index: int) -> "CodeContent":
        return self.model_copy(update={"code": body, "index": index})


ArtifactContent = Annotated[Union[MarkdownContent, CodeContent], Field(discriminator="type")]


class Artifact(BaseModel):
    """Revision history of one artifact. `current_index` is 1-based."""

    model_config = ConfigDict(frozen=True)

    current_index: int
    contents: tuple[ArtifactContent, ...]

    @model_validator(mode="after")
    def _check_revisions(self) -> "Artifact":
        if not self.contents:
            raise ValueError("Artifact must hold at least one revision.")
        for position, content in enumerate(self.contents, 1):
            if content.index != position:
                raise ValueError(
                    f"Revision at position {position} has index {content.index}."
                )
        if not 1 <= self.current_index <= len(self.contents):
            raise ValueError(
                f"current_index {self.current_index} does not reference a revision "
                f"(have {len(self.contents)})."
            )
        return self

    @classmethod
    def first(cls, content: MarkdownContent | CodeContent) -> "Artifact":
        return cls(current_index=1, contents=(content,))

    @property
    def next_index(self) -> int:
        return len(self.contents) + 1

    def current_content(self) -> MarkdownContent | CodeContent:
        return self.contents[self.current_index - 1]

    def with_revision(self, content: MarkdownContent | CodeContent) -> "Artifact":
        """Return a new artifact with `content` appended and selected."""
        if content.index != self.next_index:
            raise ValueError(
                f"New revision must have index {self.next_index}, got {content.index}."
            )
        return Artifact(
            current_index=self.next_index,
            contents=self.contents + (content,),
        )


def append_revision(
    artifact: Artifact | None, content: MarkdownContent | CodeContent
) -> Artifact:
    """Commit `content` onto `artifact`, creating the artifact when absent."""
    if artifact is None:
        return Artifact.first(content)
    return artifact.with_revision(content)


def next_revision_index(artifact: Artifact | None) -> int:
    return artifact.next_index if artifact is not None else 1


# ---------------------------------------------------------------------------
# Requirements
# ---------------------------------------------------------------------------


class RequirementsRecord(BaseModel):
    """Structured extraction of what the user wants built."""

    main_goal: str = Field(default="", description="The main goal of the page to be created")
    key_features: list[str] = Field(
        default_factory=list,
        description="Key features and components, including layout, navigation and main content areas",
    )
    technical_requirements: list[str] = Field(
        default_factory=list,
        description="HTML structure, CSS styling, JavaScript functionality and required libraries",
    )
    preferences: list[str] = Field(
        default_factory=list,
        description="Design preferences: colors, typography, spacing, animation, visual style",
    )
    considerations: list[str] = Field(
        default_factory=list,
        description="Compatibility, performance and other technical considerations",
    )
    ui_components: list[str] = Field(
        default_factory=list, description="UI components needed (buttons, forms, cards, modals...)"
    )
    interactions: list[str] = Field(
        default_factory=list, description="User interactions: hover, click, validation, transitions"
    )
    data_visualization: list[str] = Field(
        default_factory=list, description="Charts, graphs or tables, if needed"
    )
    responsive_layouts: list[str] = Field(
        default_factory=list, description="Behaviour across screen sizes and devices"
    )
    accessibility_features: list[str] = Field(
        default_factory=list, description="ARIA, keyboard navigation, screen readers, contrast"
    )

    @field_validator("main_goal", mode="before")
    @classmethod
    def _none_to_empty_string(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator(
        "key_features",
        "technical_requirements",
        "preferences",
        "considerations",
        "ui_components",
        "interactions",
        "data_visualization",
        "responsive_layouts",
        "accessibility_features",
        mode="before",
    )
    @classmethod
    def _none_to_empty_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value


# ---------------------------------------------------------------------------
# Web DSL
# ---------------------------------------------------------------------------


class DSLState(BaseModel):
    name: str
    initial_value: str = ""
    description: str = ""


class DSLEffect(BaseModel):
    target: str = Field(description="Element id or state name modified by the event")
    action: str = Field(description="e.g. updateState, setStyle, toggleClass, navigateTo")
    details: str = ""


class DSLEvent(BaseModel):
    type: str = Field(description="DOM event, e.g. onClick, onChange")
    handler_description: str = ""
    affects: list[DSLEffect] = Field(default_factory=list)


class DSLElement(BaseModel):
    id: str
    parent_id: str | None = None
    element_type: str = Field(description="HTML tag or component kind")
    content: str | None = None
    class_name: list[str] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)
    functionality: str = ""
    events: list[DSLEvent] = Field(default_factory=list)
    interactions: dict[str, str] = Field(
        default_factory=dict, description="Visual feedback per interaction: hover, focus, active"
    )


class DSLFlow(BaseModel):
    name: str
    description: str = ""
    steps: list[str] = Field(default_factory=list)


class DSLMetadata(BaseModel):
    title: str = ""


class WebDSL(BaseModel):
    """Declarative blueprint of a single-page UI."""

    description: str = ""
    metadata: DSLMetadata = Field(default_factory=DSLMetadata)
    states: list[DSLState] = Field(default_factory=list)
    elements: list[DSLElement] = Field(default_factory=list)
    flows: list[DSLFlow] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


class EvaluationMetric(BaseModel):
    name: str = Field(description="Name of the evaluation metric")
    description: str = Field(description="What this metric evaluates")
    weight: float = Field(ge=0, le=1, description="Weight of this metric in the overall score")
    criteria: list[str] = Field(description="Specific criteria to evaluate for this metric")


class EvaluationMetrics(BaseModel):
    """Dynamic evaluation metrics based on requirements analysis."""

    metrics: list[EvaluationMetric] = Field(default_factory=list)


class MetricScore(BaseModel):
    score: float = Field(ge=0, le=100, description="Score for this metric")
    comment: str = Field(description="One-sentence evaluation comment for this metric")


class PreferenceScore(BaseModel):
    score: float = Field(ge=0, le=100)
    comment: str = ""


class OverallAssessment(BaseModel):
    total_score: float = Field(ge=0, le=100, description="Final score for this candidate")
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)


class CandidateComparison(BaseModel):
    article_id: str = Field(description="Identifier of the candidate, e.g. article_1")
    scores: list[MetricScore] = Field(default_factory=list)
    content_preferences: PreferenceScore
    style_preferences: PreferenceScore
    overall: OverallAssessment


class BestCandidateChoice(BaseModel):
    article_id: str = Field(description="Identifier of the best candidate")
    total_score: float = Field(ge=0, le=100)
    justification: str = Field(description="One-sentence justification")


class CandidateEvaluation(BaseModel):
    """Comparison of every candidate plus the single best pick."""

    article_comparison: list[CandidateComparison]
    best_article: BestCandidateChoice

    def comparison_for(self, article_id: str) -> CandidateComparison | None:
        for comparison in self.article_comparison:
            if comparison.article_id == article_id:
                return comparison
        return None


class Candidate(BaseModel):
    id: str
    content: str


class BestCandidate(BaseModel):
    id: str
    content: str
    score: float


class EvaluationResult(BaseModel):
    best_article: BestCandidate
    details: CandidateEvaluation
    metrics: EvaluationMetrics

    @property
    def score(self) -> float:
        return self.best_article.score


# ---------------------------------------------------------------------------
# Artifact metadata, reflections, custom actions, search
# ---------------------------------------------------------------------------


class ArtifactMeta(BaseModel):
    """Update the artifact meta information, if necessary."""

    type: Literal["text", "code"] = Field(description="The type of the artifact content.")
    title: str | None = Field(
        default=None,
        description="New title. ONLY set this if the request changes the subject of the artifact.",
    )
    language: str = Field(
        default="other",
        description="Programming language when the user asks for code, otherwise 'other'.",
    )


class Reflections(BaseModel):
    style_rules: list[str] = Field(
        default_factory=list, description="The complete new list of style rules and guidelines."
    )
    content: list[str] = Field(
        default_factory=list, description="The complete new list of memories/facts about the user."
    )


class CustomQuickAction(BaseModel):
    id: str
    title: str = ""
    prompt: str
    include_reflections: bool = False
    include_prefix: bool = False
    include_recent_history: bool = False


class SearchResult(BaseModel):
    title: str = ""
    url: str = ""
    content: str = ""
    score: float | None = None
    published_date: str | None = None


# ---------------------------------------------------------------------------
# Highlights
# ---------------------------------------------------------------------------


class TextHighlight(BaseModel):
    full_markdown: str
    markdown_block: str
    selected_text: str


class CodeHighlight(BaseModel):
    start_char_index: int = Field(ge=0)
    end_char_index: int = Field(ge=0)
