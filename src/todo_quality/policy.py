"""Keyword policy tables for content heuristics.

Actionability, complexity and vague-language detection are driven by the
ordered keyword tables below. They are bundled in a frozen KeywordPolicy
so a caller can tune or replace them without touching the graph or
aggregation code.
"""

from __future__ import annotations

from dataclasses import dataclass

# Verbs a task description must start with to count as actionable
ACTION_VERBS: tuple[str, ...] = (
    "implement",
    "create",
    "build",
    "write",
    "add",
    "remove",
    "update",
    "fix",
    "test",
    "deploy",
    "configure",
    "setup",
    "install",
    "design",
    "develop",
    "refactor",
    "optimize",
    "migrate",
    "integrate",
    "debug",
    "analyze",
    "research",
    "document",
    "validate",
    "verify",
    "review",
)

# Each word present anywhere in the content adds one complexity point
COMPLEXITY_WORDS: tuple[str, ...] = (
    "integrate",
    "refactor",
    "optimize",
    "migrate",
    "analyze",
    "algorithm",
    "performance",
    "security",
    "architecture",
)

# Any one of these adds a single point, however many appear
TECHNICAL_TERMS: tuple[str, ...] = ("database", "api", "system")

# Every two occurrences (summed across separators) add one point
MULTI_ACTION_SEPARATORS: tuple[str, ...] = (" and ", ", ")

# Generic terms that make a task vague; only the first match is reported
VAGUE_TERMS: tuple[str, ...] = (
    "thing",
    "stuff",
    "item",
    "something",
    "fix issues",
    "handle",
)

MIN_COMPLEXITY_SCORE = 1
MAX_COMPLEXITY_SCORE = 10


@dataclass(frozen=True)
class KeywordPolicy:
    """Bundle of keyword tables used by the content heuristics.

    Attributes:
        action_verbs: Prefixes that make a task actionable.
        complexity_words: Words that each add one complexity point.
        technical_terms: Words that together add at most one point.
        multi_action_separators: Separators counted as extra actions.
        vague_terms: Generic terms flagged as vague language.
    """

    action_verbs: tuple[str, ...] = ACTION_VERBS
    complexity_words: tuple[str, ...] = COMPLEXITY_WORDS
    technical_terms: tuple[str, ...] = TECHNICAL_TERMS
    multi_action_separators: tuple[str, ...] = MULTI_ACTION_SEPARATORS
    vague_terms: tuple[str, ...] = VAGUE_TERMS

    def is_actionable(self, content: str) -> bool:
        """Return True if the lower-cased content starts with an action verb."""
        lower = content.lower()
        return any(lower.startswith(verb) for verb in self.action_verbs)

    def complexity_score(self, content: str) -> int:
        """Score content complexity on a 1-10 scale.

        Base score 1, +1 per complexity word present, +1 if any technical
        term is present, plus one point per two multi-action separators.
        """
        lower = content.lower()
        score = MIN_COMPLEXITY_SCORE

        for word in self.complexity_words:
            if word in lower:
                score += 1

        if any(term in lower for term in self.technical_terms):
            score += 1

        action_count = sum(lower.count(sep) for sep in self.multi_action_separators)
        score += action_count // 2

        return min(score, MAX_COMPLEXITY_SCORE)

    def find_vague_term(self, content: str) -> str | None:
        """Return the first vague term found in the content, if any."""
        lower = content.lower()
        for term in self.vague_terms:
            if term in lower:
                return term
        return None

    def matched_keywords(self, content: str) -> list[str]:
        """Return the action verb and complexity/technical words in content.

        Used to derive tags; order follows the policy tables.
        """
        lower = content.lower()
        matched: list[str] = []
        for verb in self.action_verbs:
            if lower.startswith(verb):
                matched.append(verb)
                break
        for word in (*self.complexity_words, *self.technical_terms):
            if word in lower and word not in matched:
                matched.append(word)
        return matched


DEFAULT_POLICY = KeywordPolicy()
