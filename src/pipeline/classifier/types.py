from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Tuple


class Verdict(Enum):
    ACCEPTED = "accepted"
    REJECTED_AS_CODE = "rejected_as_code"
    REJECTED_AS_NON_MATH = "rejected_as_non_math"

    @property
    def accepted(self) -> bool:
        return self is Verdict.ACCEPTED


class ClassificationRejection(Exception):
    """Raised when text is not an in-scope math problem."""

    def __init__(self, verdict: Verdict, text: str = ""):
        super().__init__(f"Input rejected: {verdict.value}")
        self.verdict = verdict
        self.text = text


class RuleMode(Enum):
    # the rule fires when any keyword is present
    ANY_KEYWORD = "any_keyword"
    # the rule fires when no keyword and no arithmetic symbol is present
    NO_MATH_SIGNAL = "no_math_signal"


@dataclass(frozen=True)
class KeywordRule:
    name: str
    keywords: Tuple[str, ...]
    verdict: Verdict
    mode: RuleMode = RuleMode.ANY_KEYWORD


@dataclass(frozen=True)
class ClassificationPolicy:
    """Ordered rules; the first one that fires decides, otherwise the default verdict."""
    rules: Tuple[KeywordRule, ...]
    arithmetic_symbols: FrozenSet[str] = field(default_factory=frozenset)
    default: Verdict = Verdict.ACCEPTED
