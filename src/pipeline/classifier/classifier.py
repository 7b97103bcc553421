"""
Keyword heuristics that gate which text is forwarded to the solver.

This is deliberately not a parser: it only has to be deterministic. Programming
requests are checked before math signals, so "write a program to add 2 and 3"
is rejected even though it contains digits.
"""

import logging
import string

from .types import ClassificationPolicy, ClassificationRejection, KeywordRule, RuleMode, Verdict

logger = logging.getLogger(__name__)

CODE_KEYWORDS = (
    "python", "javascript", "java", "c++", "code", "function",
    "program", "write a", "algorithm", "script",
)

MATH_INTENT_KEYWORDS = (
    "calculate", "find", "sum", "difference", "product", "quotient",
    "remainder", "total", "solve", "evaluate",
)

ARITHMETIC_SYMBOLS = frozenset(string.digits + "+-*/^()=")

DEFAULT_POLICY = ClassificationPolicy(
    rules=(
        KeywordRule("programming_request", CODE_KEYWORDS, Verdict.REJECTED_AS_CODE),
        KeywordRule("no_math_signal", MATH_INTENT_KEYWORDS, Verdict.REJECTED_AS_NON_MATH, mode=RuleMode.NO_MATH_SIGNAL),
    ),
    arithmetic_symbols=ARITHMETIC_SYMBOLS,
    default=Verdict.ACCEPTED,
)


def _contains_keyword(lowered: str, keywords) -> bool:
    return any(keyword in lowered for keyword in keywords)


def _rule_fires(rule: KeywordRule, text: str, lowered: str, policy: ClassificationPolicy) -> bool:
    if rule.mode is RuleMode.ANY_KEYWORD:
        return _contains_keyword(lowered, rule.keywords)
    has_symbol = any(ch in policy.arithmetic_symbols for ch in text)
    return not has_symbol and not _contains_keyword(lowered, rule.keywords)


def classify(text: str, policy: ClassificationPolicy = DEFAULT_POLICY) -> Verdict:
    lowered = text.lower()
    for rule in policy.rules:
        if _rule_fires(rule, text, lowered, policy):
            logger.debug(f"Rule '{rule.name}' fired: {rule.verdict.value}")
            return rule.verdict
    return policy.default


def require_math_problem(text: str, policy: ClassificationPolicy = DEFAULT_POLICY) -> Verdict:
    verdict = classify(text, policy)
    if not verdict.accepted:
        logger.info(f"Rejected input as {verdict.value}: {text[:80]!r}")
        raise ClassificationRejection(verdict, text)
    return verdict
