#!/usr/bin/env python3
"""
classifier.py - Line Classification for AdGuard, Hosts and Plain Domain Lists

This module decides, for ONE raw line of an upstream list, whether it encodes
a blocked domain, an allowed (exception) domain, or nothing we care about.
It is the first stage of the pipeline, running BEFORE the reducer.

Supported line grammars:
    ||ads.example.com^              → Blocked   (AdGuard block rule)
    ||ads.example.com^$important    → Blocked   (same, with importance marker)
    @@||ok.example.com^             → Allowed   (AdGuard exception rule)
    ads.example.com                 → Blocked   (plain domain list)
    0.0.0.0 ads.example.com         → Blocked   (hosts file, null route)
    192.168.1.1 ads.example.com     → Blocked   (hosts file, any IPv4)

Everything else (comments, cosmetic rules, regex rules, garbage) is Ignored.
An unparseable line is never an error.

Design Decision - Ordered Rule Table:
    Patterns are evaluated in a fixed priority order and the first match wins.
    The exception prefix @@|| is checked before the bare || prefix.

Design Decision - No Normalization:
    The extracted domain is exactly the captured text. No lowercasing, no
    trailing-dot removal. Pi-hole output must match the upstream bytes.
"""

import re
from enum import Enum
from typing import Final, Iterable, Iterator, NamedTuple


# =============================================================================
# DATA STRUCTURES
# =============================================================================

class Disposition(Enum):
    """What a classified line means for the output lists."""
    IGNORED = "ignored"
    BLOCKED = "blocked"
    ALLOWED = "allowed"


class ClassifiedEntry(NamedTuple):
    """
    Result of classifying a single line.

    Attributes:
        domain: Extracted domain, or None if ignored
        disposition: Blocked, Allowed or Ignored
        rule: Name of the grammar that matched (for stats), e.g. "abp_block"

    Example:
        >>> classify("||example.com^")
        ClassifiedEntry(domain='example.com', disposition=<Disposition.BLOCKED: 'blocked'>, rule='abp_block')
    """
    domain: str | None
    disposition: Disposition
    rule: str


class LineRule(NamedTuple):
    """One row of the classification table."""
    name: str
    pattern: re.Pattern[str]
    disposition: Disposition


# =============================================================================
# REGEX PATTERNS
# =============================================================================

#: Characters allowed in a domain token everywhere in this module
DOMAIN_TOKEN: Final[str] = r"[A-Za-z0-9.-]+"

#: Blank line or "!" comment (evaluated on the stripped line)
COMMENT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?:$|!)")

#: AdGuard exception rule: @@||domain^
#: Anything after ^ (modifiers) is tolerated, as with block rules.
ABP_ALLOW_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"^@@\|\|(?P<domain>{DOMAIN_TOKEN})\^"
)

#: AdGuard block rule: ||domain^ or ||domain^$important
ABP_BLOCK_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"^\|\|(?P<domain>{DOMAIN_TOKEN})\^"
)

#: Plain domain line: whole line is label(.label)+ with a >=2 letter TLD
PLAIN_DOMAIN_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<domain>[A-Za-z0-9][A-Za-z0-9.-]*\.[A-Za-z]{2,})$"
)

#: Hosts file with a null-route address: 0.0.0.0 domain / 127.0.0.1 domain
NULL_HOSTS_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"^(?:0\.0\.0\.0|127\.0\.0\.1)\s+(?P<domain>{DOMAIN_TOKEN})"
)

#: Hosts file with any other dotted-quad address
IPV4_HOSTS_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"^[0-9]{{1,3}}\.[0-9]{{1,3}}\.[0-9]{{1,3}}\.[0-9]{{1,3}}\s+(?P<domain>{DOMAIN_TOKEN})"
)

#: Classification table, highest priority first.
RULES: Final[tuple[LineRule, ...]] = (
    LineRule("abp_allow", ABP_ALLOW_PATTERN, Disposition.ALLOWED),
    LineRule("abp_block", ABP_BLOCK_PATTERN, Disposition.BLOCKED),
    LineRule("plain_domain", PLAIN_DOMAIN_PATTERN, Disposition.BLOCKED),
    LineRule("null_hosts", NULL_HOSTS_PATTERN, Disposition.BLOCKED),
    LineRule("ipv4_hosts", IPV4_HOSTS_PATTERN, Disposition.BLOCKED),
)

IGNORED_EMPTY: Final[ClassifiedEntry] = ClassifiedEntry(None, Disposition.IGNORED, "empty")
IGNORED_COMMENT: Final[ClassifiedEntry] = ClassifiedEntry(None, Disposition.IGNORED, "comment")
IGNORED_UNMATCHED: Final[ClassifiedEntry] = ClassifiedEntry(None, Disposition.IGNORED, "unmatched")


# =============================================================================
# CLASSIFICATION FUNCTIONS
# =============================================================================

def is_comment(line: str) -> bool:
    """
    Check if a stripped line is blank or a "!" comment.

    Example:
        >>> is_comment("! Title: AdGuard DNS filter")
        True
        >>> is_comment("||example.com^")
        False
    """
    return bool(COMMENT_PATTERN.match(line))


def classify(line: str) -> ClassifiedEntry:
    """
    Classify a single raw line.

    Surrounding whitespace (including a CRLF remainder) is stripped first.
    The rule table is walked in priority order; the first pattern that
    matches decides the disposition and the captured domain.

    Args:
        line: The raw line to classify

    Returns:
        ClassifiedEntry with domain/disposition/rule

    Example:
        >>> classify("@@||ok.example.com^").disposition
        <Disposition.ALLOWED: 'allowed'>
        >>> classify("0.0.0.0 track.example.com").domain
        'track.example.com'
        >>> classify("example.com##.banner").disposition
        <Disposition.IGNORED: 'ignored'>
    """
    line = line.strip()

    if not line:
        return IGNORED_EMPTY

    if is_comment(line):
        return IGNORED_COMMENT

    for rule in RULES:
        match = rule.pattern.match(line)
        if match:
            return ClassifiedEntry(match.group("domain"), rule.disposition, rule.name)

    return IGNORED_UNMATCHED


def classify_lines(lines: Iterable[str]) -> Iterator[ClassifiedEntry]:
    """Classify every line of a source, one entry per line."""
    for line in lines:
        yield classify(line)
