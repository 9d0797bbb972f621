"""
Wildcard matching for ignore patterns.

Only ``*`` (zero or more characters) and ``?`` (exactly one character) are
special; every other character must match literally. A pattern always has
to account for the whole string.
"""

from __future__ import annotations

from typing import Iterable


def matches(text: str, pattern: str) -> bool:
    """Return True if *pattern* matches all of *text*."""
    if not pattern:
        return not text

    n, m = len(text), len(pattern)
    # dp[i][j]: text[:i] is matched by pattern[:j]
    dp = [[False] * (m + 1) for _ in range(n + 1)]
    dp[0][0] = True

    # a run of leading '*' can match the empty string
    for j in range(1, m + 1):
        if pattern[j - 1] == "*":
            dp[0][j] = dp[0][j - 1]

    for i in range(1, n + 1):
        for j in range(1, m + 1):
            p = pattern[j - 1]
            if p == "*":
                dp[i][j] = dp[i][j - 1] or dp[i - 1][j]
            elif p == "?" or p == text[i - 1]:
                dp[i][j] = dp[i - 1][j - 1]

    return dp[n][m]


def matches_any(name: str, patterns: Iterable[str]) -> bool:
    """Return True as soon as one of *patterns* matches *name*."""
    return any(matches(name, pat) for pat in patterns)
