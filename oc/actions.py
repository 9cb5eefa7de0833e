"""Quick rewrite actions as tagged unions.

Exactly one variant is carried per request. `artifact_action_from_flags` and
`code_action_from_flags` translate the legacy boolean/enum flags sent by
clients and reject zero or several selections.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

ReadingLevel = Literal["child", "teenager", "college", "phd", "pirate"]
ArtifactLength = Literal["shortest", "short", "long", "longest"]


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Markdown artifact actions ---


class ChangeLanguage(_Action):
    kind: Literal["language"] = "language"
    language: str


class ChangeReadingLevel(_Action):
    kind: Literal["reading_level"] = "reading_level"
    level: ReadingLevel


class ChangeLength(_Action):
    kind: Literal["length"] = "length"
    length: ArtifactLength


class AddEmojis(_Action):
    kind: Literal["emojis"] = "emojis"


ArtifactAction = Annotated[
    Union[ChangeLanguage, ChangeReadingLevel, ChangeLength, AddEmojis],
    Field(discriminator="kind"),
]


# --- Code artifact actions ---


class AddComments(_Action):
    kind: Literal["add_comments"] = "add_comments"


class AddLogs(_Action):
    kind: Literal["add_logs"] = "add_logs"


class FixBugs(_Action):
    kind: Literal["fix_bugs"] = "fix_bugs"


class PortLanguage(_Action):
    kind: Literal["port_language"] = "port_language"
    language: str


CodeAction = Annotated[
    Union[AddComments, AddLogs, FixBugs, PortLanguage],
    Field(discriminator="kind"),
]


def _exactly_one(selected: list, label: str):
    if len(selected) != 1:
        raise ValueError(
            f"Exactly one {label} flag must be set, got {len(selected)}."
        )
    return selected[0]


def artifact_action_from_flags(
    language: str | None = None,
    reading_level: str | None = None,
    artifact_length: str | None = None,
    regenerate_with_emojis: bool = False,
):
    """Build the markdown rewrite action selected by client flags."""
    selected = []
    if language:
        selected.append(ChangeLanguage(language=language))
    if reading_level:
        selected.append(ChangeReadingLevel(level=reading_level))
    if artifact_length:
        selected.append(ChangeLength(length=artifact_length))
    if regenerate_with_emojis:
        selected.append(AddEmojis())
    return _exactly_one(selected, "theme")


def code_action_from_flags(
    add_comments: bool = False,
    add_logs: bool = False,
    fix_bugs: bool = False,
    port_language: str | None = None,
):
    """Build the code rewrite action selected by client flags."""
    selected = []
    if add_comments:
        selected.append(AddComments())
    if add_logs:
        selected.append(AddLogs())
    if fix_bugs:
        selected.append(FixBugs())
    if port_language:
        selected.append(PortLanguage(language=port_language))
    return _exactly_one(selected, "code rewrite")
