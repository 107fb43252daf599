"""
Typed models for result matching.

Answers, stored match conditions, results and test definitions are pydantic
models so that records coming out of the store are validated once, at the
boundary, and the matching code can rely on their shape.

MatchCondition is a discriminated union on ``type``. Anything that is not a
well-formed score or code condition is represented as UnrecognizedCondition,
which never matches.

Fields that do not take part in matching (names, display metadata) and
answer scores are read leniently: values of the wrong shape are logged and
dropped instead of failing the whole record.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Annotated, Any, List, Literal, NamedTuple, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)

from libs.domain_types import MatchStrategy, TargetGender

logger = logging.getLogger(__name__)

Number = Union[int, float]


def _coerce_identifier(v: Any) -> Any:
    if v is None or isinstance(v, (int, str)):
        return v
    return str(v)


# Identifiers are opaque: UUIDs in the hosted store, ints in fixtures.
# Anything that is not already an int or str is kept as its string form.
Identifier = Annotated[Union[int, str], BeforeValidator(_coerce_identifier)]


def _lenient_score(v: Any) -> Optional[Number]:
    """
    Read a score contribution, or None if it is not a usable number.

    Integral values (including "3" and 3.0) become ints. Fractional values
    are kept as floats so totals are exact.
    """
    if v is None:
        return None
    if isinstance(v, int) and not isinstance(v, bool):
        return v
    try:
        number = float(v) if not isinstance(v, bool) else math.nan
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        logger.warning(f"Ignoring unusable score {v!r}; it counts as 0")
        return None
    return int(number) if number.is_integer() else number


def _blank_code_is_absent(v: Any) -> Optional[str]:
    if v is None:
        return None
    v = str(v).strip()
    return v or None


Score = Annotated[Optional[Number], BeforeValidator(_lenient_score)]
Code = Annotated[Optional[str], BeforeValidator(_blank_code_is_absent)]


class Answer(BaseModel):
    """One user response to one question."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question_id: Optional[Identifier] = Field(default=None, alias="questionId")
    choice_id: Optional[Identifier] = Field(default=None, alias="choiceId")
    score: Score = Field(
        default=None, description="Points for the chosen choice; None counts as 0"
    )
    code: Code = Field(
        default=None, description="Type code carried by the chosen choice"
    )

    @property
    def points(self) -> Number:
        return self.score or 0


class ScoreCondition(BaseModel):
    """Inclusive score range. ``max`` of None means unbounded."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["score"] = "score"
    min: int = 0
    max: Optional[int] = None

    @field_validator("min", mode="before")
    @classmethod
    def missing_min_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    def contains(self, score: Number) -> bool:
        if score < self.min:
            return False
        return self.max is None or score <= self.max


class CodeCondition(BaseModel):
    """One or more type codes that must combine to match."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["code"] = "code"
    codes: List[str] = Field(..., min_length=1)

    @field_validator("codes", mode="before")
    @classmethod
    def coerce_codes(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [str(code) for code in v]
        return v

    @property
    def is_single(self) -> bool:
        return len(self.codes) == 1


class UnrecognizedCondition(BaseModel):
    """A stored condition of unknown shape. Never matches."""

    model_config = ConfigDict(frozen=True)

    type: Literal["unrecognized"] = "unrecognized"
    raw: Any = None


MatchCondition = Annotated[
    Union[ScoreCondition, CodeCondition, UnrecognizedCondition],
    Field(discriminator="type"),
]


class Result(BaseModel):
    """One predefined outcome of a test."""

    model_config = ConfigDict(frozen=True)

    id: Optional[Identifier] = None
    name: str = ""
    description: Optional[str] = None
    order: int = 0
    match_condition: Optional[MatchCondition] = None
    target_gender: Optional[str] = None

    # Display metadata, carried through untouched
    emoji: Optional[str] = None
    theme_color: Optional[str] = None
    features: Optional[List[str]] = None
    keywords: Optional[List[str]] = None
    jobs: Optional[List[str]] = None
    background_image_url: Optional[str] = None
    share_image_url: Optional[str] = None
    percentage: Optional[float] = None

    @field_validator("name", mode="before")
    @classmethod
    def missing_name_is_blank(cls, v: Any) -> Any:
        return "" if v is None else str(v)

    @field_validator("order", mode="before")
    @classmethod
    def unusable_order_is_zero(cls, v: Any) -> Any:
        if v is None:
            return 0
        try:
            return int(v)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unusable result order {v!r}")
            return 0

    @field_validator(
        "description",
        "emoji",
        "theme_color",
        "background_image_url",
        "share_image_url",
        mode="before",
    )
    @classmethod
    def drop_malformed_text(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None or isinstance(v, str):
            return v
        logger.warning(f"Dropping malformed {info.field_name} {v!r}")
        return None

    @field_validator("features", "keywords", "jobs", mode="before")
    @classmethod
    def drop_malformed_list(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return None
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v]
        logger.warning(f"Dropping malformed {info.field_name} {v!r}")
        return None

    @field_validator("percentage", mode="before")
    @classmethod
    def drop_malformed_percentage(cls, v: Any) -> Any:
        if v is None:
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            logger.warning(f"Dropping malformed percentage {v!r}")
            return None

    @field_validator("target_gender", mode="before")
    @classmethod
    def normalize_target_gender(cls, v: Any) -> Any:
        if v is None:
            return None
        v = str(v.value if isinstance(v, TargetGender) else v).strip().lower()
        return v or None

    def is_open_to(self, gender: Optional[str]) -> bool:
        """
        Whether this result may be shown to a user of ``gender``.

        Unlike a plain equality check, the comparison ignores case, so a
        stored "Female" matches a caller passing "female".
        """
        if self.target_gender is None or self.target_gender == TargetGender.ALL:
            return True
        return gender is not None and self.target_gender == str(gender).lower()


class Choice(BaseModel):
    """A selectable choice of a question, with its score and code."""

    model_config = ConfigDict(frozen=True)

    id: Identifier
    text: str = ""
    order: int = 0
    score: Score = None
    code: Code = None


class Question(BaseModel):
    """A test question and its choices."""

    model_config = ConfigDict(frozen=True)

    id: Identifier
    text: str = ""
    order: int = 0
    choices: List[Choice] = Field(default_factory=list)


class TestDefinition(BaseModel):
    """Everything the engine needs to know about one test."""

    model_config = ConfigDict(frozen=True)

    id: Optional[Identifier] = None
    results: List[Result] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)


class CodeCount(NamedTuple):
    """Frequency of one code across an answer set."""

    code: str
    count: int


@dataclass
class MatchOutcome:
    """A matched result together with how it was reached."""

    result: Result
    strategy: MatchStrategy
    score: Number
    dominant_codes: List[CodeCount] = field(default_factory=list)
    candidate_count: int = 0
