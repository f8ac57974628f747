#!/usr/bin/env python3
"""
reducer.py - Deduplicate Classified Entries into Sorted Domain Lists

Second stage of the pipeline. Takes the ClassifiedEntry stream produced by
the classifier and folds it into two canonical collections:

    blocked  →  <name>.txt            (Pi-hole denylist / adlist)
    allowed  →  <name>_whitelist.txt  (Pi-hole allowlist)

INVARIANTS:
    1. No duplicates - exact string match, case-sensitive
    2. Sorted by code point (ASCII byte order for domain tokens)
    3. Order independent - shuffling the input never changes the output
    4. Idempotent - reducing an already reduced list changes nothing

Allow entries do NOT remove blocked entries. Pi-hole resolves the
conflict itself once both lists are imported.

Because the fold is pure, results of independent sources can be joined in
any order with merge_results().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, NamedTuple

from agh2pihole.classifier import ClassifiedEntry, Disposition


# ============================================================================
# DATA STRUCTURES
# ============================================================================

class RuleListResult(NamedTuple):
    """Blocked and allowed domains of one logical list, sorted and unique."""
    blocked: tuple[str, ...] = ()
    allowed: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when no blocked domain was extracted (warning condition)."""
        return not self.blocked


@dataclass
class ReduceStats:
    """Statistics from reduction."""
    total_input: int = 0
    ignored: int = 0
    blocked_duplicates: int = 0
    allowed_duplicates: int = 0
    blocked_output: int = 0
    allowed_output: int = 0


# ============================================================================
# REDUCTION
# ============================================================================

def sorted_unique(domains: Iterable[str]) -> tuple[str, ...]:
    """
    Collapse exact duplicates and sort.

    Example:
        >>> sorted_unique(["b.test", "a.test", "b.test"])
        ('a.test', 'b.test')
    """
    return tuple(sorted(set(domains)))


def reduce_with_stats(entries: Iterable[ClassifiedEntry]) -> tuple[RuleListResult, ReduceStats]:
    """
    Partition entries by disposition and deduplicate each side.

    Returns:
        (RuleListResult, ReduceStats)
    """
    stats = ReduceStats()
    blocked: set[str] = set()
    allowed: set[str] = set()

    for entry in entries:
        stats.total_input += 1

        if entry.disposition is Disposition.BLOCKED:
            if entry.domain in blocked:
                stats.blocked_duplicates += 1
            else:
                blocked.add(entry.domain)
        elif entry.disposition is Disposition.ALLOWED:
            if entry.domain in allowed:
                stats.allowed_duplicates += 1
            else:
                allowed.add(entry.domain)
        else:
            stats.ignored += 1

    result = RuleListResult(sorted_unique(blocked), sorted_unique(allowed))
    stats.blocked_output = len(result.blocked)
    stats.allowed_output = len(result.allowed)
    return result, stats


def reduce_entries(entries: Iterable[ClassifiedEntry]) -> RuleListResult:
    """
    Reduce classified entries to sorted unique blocked/allowed domains.

    Example:
        >>> from agh2pihole.classifier import classify
        >>> reduce_entries(classify(l) for l in ["||b.test^", "a.test", "||b.test^"])
        RuleListResult(blocked=('a.test', 'b.test'), allowed=())
    """
    result, _ = reduce_with_stats(entries)
    return result


def merge_results(*results: RuleListResult) -> RuleListResult:
    """
    Join the results of several sources.

    Associative and commutative, so sources processed concurrently can be
    merged in whatever order they finish.
    """
    blocked: set[str] = set()
    allowed: set[str] = set()
    for result in results:
        blocked.update(result.blocked)
        allowed.update(result.allowed)
    return RuleListResult(sorted_unique(blocked), sorted_unique(allowed))
