"""Domain authority lookup with exact and wildcard rules."""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

from feedrank.ranker.constants import (
    DEFAULT_AUTHORITY_KEY,
    DEFAULT_AUTHORITY_SCORE,
    SOURCE_AUTHORITY,
)


def wildcard_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a ``*`` wildcard domain pattern into an anchored regex.

    Literal segments are escaped, so ``blog.*`` matches ``blog.example.com``
    but not ``blogXexample.com``.

    Args:
        pattern: Domain pattern such as ``blog.*`` or ``*.dev``.

    Returns:
        Compiled regex matching the whole domain.
    """
    body = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.compile(f"^{body}$")


@dataclass(frozen=True)
class AuthorityRule:
    """One authority table entry.

    Attributes:
        pattern: Exact domain or wildcard pattern as declared.
        score: Authority score (1-10).
        regex: Compiled matcher for wildcard patterns, None for exact rules.
    """

    pattern: str
    score: float
    regex: re.Pattern[str] | None = None

    @classmethod
    def from_entry(cls, pattern: str, score: float) -> "AuthorityRule":
        """Build a rule, compiling a matcher when the pattern has a wildcard."""
        regex = wildcard_to_regex(pattern) if "*" in pattern else None
        return cls(pattern=pattern, score=float(score), regex=regex)

    @property
    def is_wildcard(self) -> bool:
        """Whether this rule matches by pattern rather than exact string."""
        return self.regex is not None

    def matches(self, domain: str) -> bool:
        """Check whether the rule applies to a domain."""
        if self.regex is None:
            return domain == self.pattern
        return self.regex.match(domain) is not None


class AuthorityMatcher:
    """Resolves a domain's authority score.

    Lookup order:
        1. Exact domain rule
        2. Wildcard rules in declaration order (first match wins)
        3. The reserved ``default`` entry
    """

    def __init__(self, entries: Iterable[tuple[str, float]] = SOURCE_AUTHORITY) -> None:
        """Initialize the matcher.

        Args:
            entries: Ordered (pattern, score) pairs, optionally containing
                the reserved ``default`` key.
        """
        self._default = DEFAULT_AUTHORITY_SCORE
        self._exact: dict[str, float] = {}
        self._patterns: list[AuthorityRule] = []
        self._rules: list[AuthorityRule] = []

        for pattern, score in entries:
            if pattern == DEFAULT_AUTHORITY_KEY:
                self._default = float(score)
                continue
            rule = AuthorityRule.from_entry(pattern, score)
            self._rules.append(rule)
            if rule.is_wildcard:
                self._patterns.append(rule)
            else:
                # First declaration of a duplicate key wins
                self._exact.setdefault(pattern, rule.score)

    @property
    def default_score(self) -> float:
        """Score applied when no rule matches."""
        return self._default

    @property
    def rules(self) -> list[AuthorityRule]:
        """All non-default rules in declaration order."""
        return list(self._rules)

    def score(self, domain: str) -> float:
        """Return the authority score for a domain key.

        Args:
            domain: Normalized domain key.

        Returns:
            Authority score in [1, 10].
        """
        exact = self._exact.get(domain)
        if exact is not None:
            return exact

        for rule in self._patterns:
            if rule.matches(domain):
                return rule.score

        return self._default


@lru_cache(maxsize=1)
def default_matcher() -> AuthorityMatcher:
    """Matcher over the compiled-in authority table."""
    return AuthorityMatcher(SOURCE_AUTHORITY)


def authority_score(domain: str) -> float:
    """Authority score of a domain under the compiled-in table.

    Args:
        domain: Normalized domain key.

    Returns:
        Authority score in [1, 10].
    """
    return default_matcher().score(domain)
