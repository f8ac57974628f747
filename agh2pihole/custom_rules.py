"""
custom_rules.py - Extract anchored domains from free-form user rules.

User rules in an AdGuard Home backup are hand-written and may hold several
rules per line, quoted YAML scalars, or prose around them. Unlike the line
classifier this pass does not parse whole-line grammars: it scans for every
anchored-domain token ``||token^`` anywhere in the text.

    "some text ||a.test^ more ||b.test^ junk"  →  ("a.test", "b.test")

The token stops at the first ``^`` and may not contain quote characters.
The ``@@`` exception prefix, ``!`` comments and hosts lines are NOT
recognised here.
"""

from __future__ import annotations

import re
from typing import Final, Iterable, Iterator

from agh2pihole.reducer import sorted_unique


#: ||token^ where token excludes ' ^ "
ANCHORED_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"\|\|([^'^\"]*)\^")


def iter_anchored_tokens(line: str) -> Iterator[str]:
    """Yield each non-overlapping anchored token of a line, delimiters removed."""
    for match in ANCHORED_TOKEN_PATTERN.finditer(line):
        token = match.group(1)
        # "||^" carries no domain
        if token:
            yield token


def extract_anchored_domains(block: Iterable[str]) -> tuple[str, ...]:
    """
    Extract every anchored domain from a pre-bounded block of rule text.

    Args:
        block: Lines of user rule text (the caller has located the block)

    Returns:
        Sorted, unique domains. Empty when nothing matched; the caller
        reports that as a warning.

    Example:
        >>> extract_anchored_domains(["some text ||a.test^ more ||b.test^ junk"])
        ('a.test', 'b.test')
    """
    return sorted_unique(token for line in block for token in iter_anchored_tokens(line))
