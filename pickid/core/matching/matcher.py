"""
Result matching strategy chain.

Given the candidate results of a test, the aggregated score and the user's
answers, pick exactly one result:

1. Gender filter. Results targeted at the user's gender, or at everyone,
   become the candidates. If none qualify, all results stay candidates.
2. Code strategies, only when at least one answer carries a code. Tried in
   order, first hit wins:
   single code -> exact combination -> reversed combination
   -> superset -> partial overlap.
   Each strategy scans every candidate before the next one is consulted.
3. Score range: first candidate whose score condition contains the score.
4. Fallback: first candidate, then first result. None only when there are
   no results at all.
"""

import logging
from dataclasses import dataclass
from typing import (
    Iterable,
    Iterator,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
)

from libs.domain_types import MatchStrategy
from pickid.core.config import settings

from ._types import (
    CodeCondition,
    CodeCount,
    MatchOutcome,
    Number,
    Result,
    ScoreCondition,
)
from .aggregation import AnswerLike, as_answers, code_sequence, dominant_codes, tally_codes
from .conditions import evaluate_condition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodeEvidence:
    """Code data derived from one answer set."""

    sequence: List[str]  # one code per coded answer, answer order
    tally: List[CodeCount]
    separator: str = ","

    @property
    def dominant(self) -> List[str]:
        return dominant_codes(self.tally)

    @property
    def joined_sequence(self) -> str:
        return self.separator.join(self.sequence)


class CodeStrategy(Protocol):
    """A code-based matching strategy."""

    def __call__(
        self, candidates: Sequence[Result], evidence: CodeEvidence
    ) -> Optional[Result]:
        ...


def filter_by_gender(results: Sequence[Result], gender: Optional[str]) -> List[Result]:
    """
    Restrict results to those open to ``gender``.

    Falls back to the unfiltered results when the filter would leave nothing,
    so a gender-specific test never runs out of candidates.
    """
    if not gender:
        return list(results)
    filtered = [r for r in results if r.is_open_to(gender)]
    return filtered if filtered else list(results)


def _code_conditions(
    candidates: Iterable[Result],
) -> Iterator[Tuple[Result, CodeCondition]]:
    for result in candidates:
        if isinstance(result.match_condition, CodeCondition):
            yield result, result.match_condition


def match_single_code(
    candidates: Sequence[Result], evidence: CodeEvidence
) -> Optional[Result]:
    """First single-code result whose code is the most frequent code."""
    dominant = evidence.dominant
    for result, condition in _code_conditions(candidates):
        if evaluate_condition(condition, 0, dominant):
            return result
    return None


def match_exact_combination(
    candidates: Sequence[Result], evidence: CodeEvidence
) -> Optional[Result]:
    """First result whose codes, in order, equal the answer code sequence."""
    target = evidence.joined_sequence
    for result, condition in _code_conditions(candidates):
        if evidence.separator.join(condition.codes) == target:
            return result
    return None


def match_reversed_combination(
    candidates: Sequence[Result], evidence: CodeEvidence
) -> Optional[Result]:
    """First result whose codes, reversed, equal the answer code sequence."""
    target = evidence.joined_sequence
    for result, condition in _code_conditions(candidates):
        if evidence.separator.join(reversed(condition.codes)) == target:
            return result
    return None


def match_superset(
    candidates: Sequence[Result], evidence: CodeEvidence
) -> Optional[Result]:
    """First result whose every code appears somewhere in the tally."""
    tallied = set(evidence.dominant)
    for result, condition in _code_conditions(candidates):
        if all(code in tallied for code in condition.codes):
            return result
    return None


def match_partial_overlap(
    candidates: Sequence[Result], evidence: CodeEvidence
) -> Optional[Result]:
    """First result sharing at least one code with the tally."""
    tallied = set(evidence.dominant)
    for result, condition in _code_conditions(candidates):
        if any(code in tallied for code in condition.codes):
            return result
    return None


def match_score_range(candidates: Sequence[Result], score: Number) -> Optional[Result]:
    """First result with a score condition containing ``score``."""
    for result in candidates:
        if isinstance(result.match_condition, ScoreCondition) and evaluate_condition(
            result.match_condition, score, []
        ):
            return result
    return None


# Tried in this order; the first strategy returning a result wins.
CODE_STRATEGIES: Tuple[Tuple[MatchStrategy, CodeStrategy], ...] = (
    (MatchStrategy.SINGLE_CODE, match_single_code),
    (MatchStrategy.EXACT_COMBINATION, match_exact_combination),
    (MatchStrategy.REVERSED_COMBINATION, match_reversed_combination),
    (MatchStrategy.SUPERSET, match_superset),
    (MatchStrategy.PARTIAL_OVERLAP, match_partial_overlap),
)


def match_with_outcome(
    results: Sequence[Result],
    score: Number,
    answers: Iterable[AnswerLike],
    gender: Optional[str] = None,
    *,
    separator: Optional[str] = None,
) -> Optional[MatchOutcome]:
    """
    Run the matching chain and report which step selected the result.

    Args:
        results: Candidate results of the test, in author order
        score: Aggregated score of the answers
        answers: Completed answers, in answer order
        gender: Optional user gender for result targeting
        separator: Separator for joined code comparison.
            Defaults to settings.MATCH_CODE_SEPARATOR.

    Returns:
        MatchOutcome, or None only when ``results`` is empty
    """
    results = list(results)
    if not results:
        return None

    candidates = filter_by_gender(results, gender)
    answer_list = as_answers(answers)
    sequence = code_sequence(answer_list)
    tally = tally_codes(answer_list)

    def outcome(result: Result, strategy: MatchStrategy) -> MatchOutcome:
        return MatchOutcome(
            result=result,
            strategy=strategy,
            score=score,
            dominant_codes=tally,
            candidate_count=len(candidates),
        )

    if sequence:
        evidence = CodeEvidence(
            sequence=sequence,
            tally=tally,
            separator=separator or settings.MATCH_CODE_SEPARATOR,
        )
        for strategy, find in CODE_STRATEGIES:
            matched = find(candidates, evidence)
            if matched is not None:
                return outcome(matched, strategy)

    matched = match_score_range(candidates, score)
    if matched is not None:
        return outcome(matched, MatchStrategy.SCORE_RANGE)

    logger.debug(
        f"No condition matched among {len(candidates)} candidates; "
        "falling back to the first result"
    )
    return outcome(candidates[0] if candidates else results[0], MatchStrategy.FALLBACK)


def match_result(
    results: Sequence[Result],
    score: Number,
    answers: Iterable[AnswerLike],
    gender: Optional[str] = None,
) -> Optional[Result]:
    """
    Pick the single result for an answer set.

    Returns None only when ``results`` is empty; otherwise some result is
    always returned.
    """
    matched = match_with_outcome(results, score, answers, gender)
    return matched.result if matched is not None else None
