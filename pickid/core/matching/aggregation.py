"""
Score aggregation and code tallying over a completed answer set.

Both functions are exposed on their own for analytics and reporting in
addition to feeding the result matcher.
"""

from collections import Counter
from typing import Any, Iterable, List, Mapping, Sequence, Union

from ._types import Answer, CodeCount, Number

AnswerLike = Union[Answer, Mapping[str, Any]]


def as_answers(answers: Iterable[AnswerLike]) -> List[Answer]:
    """Coerce plain mappings to Answer models, keeping order."""
    return [a if isinstance(a, Answer) else Answer.model_validate(a) for a in answers]


def aggregate_score(answers: Iterable[AnswerLike]) -> Number:
    """
    Sum the score contributions of all answers.

    Answers without a usable score count as 0, so an empty answer list
    yields 0. Never raises for malformed scores.

    Args:
        answers: Completed answers, as Answer models or mappings

    Returns:
        Total score

    Example:
        >>> aggregate_score([{"score": 5}, {"score": 3}, {"score": 2}])
        10
    """
    return sum(answer.points for answer in as_answers(answers))


def code_sequence(answers: Iterable[AnswerLike]) -> List[str]:
    """Per-answer codes in answer order, skipping answers without a code."""
    return [answer.code for answer in as_answers(answers) if answer.code]


def tally_codes(answers: Iterable[AnswerLike]) -> List[CodeCount]:
    """
    Count how often each code was chosen, most frequent first.

    Codes with equal counts keep the order in which they first appear in
    the answers. An answer set without any codes yields an empty list,
    which tells the matcher to go straight to score matching.

    Args:
        answers: Completed answers, as Answer models or mappings

    Returns:
        List of (code, count) pairs

    Example:
        >>> tally_codes([{"code": "B"}, {"code": "A"}, {"code": "A"}, {"code": "C"}])
        [CodeCount(code='A', count=2), CodeCount(code='B', count=1), CodeCount(code='C', count=1)]
    """
    # Counter keeps insertion order and most_common() sorts stably, so ties
    # stay in first-seen order.
    counts = Counter(code_sequence(answers))
    return [CodeCount(code, count) for code, count in counts.most_common()]


def dominant_codes(tally: Sequence[CodeCount]) -> List[str]:
    """Codes of a tally in rank order."""
    return [entry.code for entry in tally]
