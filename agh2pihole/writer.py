"""
writer.py - Output sink for converted lists.

Files written to the output directory:

    <name>.txt               one blocked domain per line
    <name>_whitelist.txt     one allowed domain per line (only if non-empty)
    adguard_filter_urls.txt  url#name list extracted from a backup
    adguard_custom_rules.txt domains extracted from backup user rules
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Final, Iterable

from agh2pihole.reducer import RuleListResult
from agh2pihole.sources import FilterSource


URL_LIST_FILENAME: Final[str] = "adguard_filter_urls.txt"
CUSTOM_RULES_FILENAME: Final[str] = "adguard_custom_rules.txt"
WHITELIST_SUFFIX: Final[str] = "_whitelist.txt"


def whitelist_filename(filename: str) -> str:
    """
    Companion allow-list name for a blocked-domain file.

    Example:
        >>> whitelist_filename("adguard_dns_filter.txt")
        'adguard_dns_filter_whitelist.txt'
    """
    stem = filename[: -len(".txt")] if filename.endswith(".txt") else filename
    return f"{stem}{WHITELIST_SUFFIX}"


def write_domains(path: Path, domains: Iterable[str]) -> int:
    """Write one domain per line. Returns the number of lines written."""
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        for domain in domains:
            f.write(domain + "\n")
            count += 1
    return count


def write_result(output_dir: Path, filename: str, result: RuleListResult) -> list[Path]:
    """
    Write a reduced list and its allow-list companion.

    An empty blocked side writes nothing; an empty allowed side writes no
    whitelist file. Returns the paths actually written.
    """
    written: list[Path] = []

    if result.blocked:
        path = output_dir / filename
        write_domains(path, result.blocked)
        written.append(path)

    if result.allowed:
        path = output_dir / whitelist_filename(filename)
        write_domains(path, result.allowed)
        written.append(path)

    return written


def write_url_list(
    output_dir: Path,
    sources: Iterable[FilterSource],
    generated_at: datetime | None = None,
) -> Path:
    """Write sources as a url#name list that `agh2pihole urls` can re-read."""
    generated_at = generated_at or datetime.now()
    path = output_dir / URL_LIST_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write("# AdGuard filter URLs extracted from config file\n")
        f.write(f"# Generated on {generated_at.isoformat(timespec='seconds')}\n")
        f.write("\n")
        for source in sources:
            f.write(f"{source.locator}#{source.name}\n")

    return path
