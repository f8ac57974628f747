"""
sources.py - Filter source definitions and URL list files.

A URL list file holds one source per line:

    # comment
    https://example.org/filter.txt#My Filter
    https://example.org/other_list.txt

The part after the last "#" is the display name; without one, the name is
derived from the URL basename minus its extension ("other_list").
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Final


@dataclass(frozen=True)
class FilterSource:
    """One upstream list: where to get it and what to call its output."""
    locator: str
    name: str
    output_filename: str = ""

    def __post_init__(self) -> None:
        if not self.output_filename:
            object.__setattr__(self, "output_filename", f"{self.name}.txt")


# Default AdGuard lists: (url, output file, display name)
ADGUARD_DNS_FILTER: Final[FilterSource] = FilterSource(
    "https://adguardteam.github.io/AdGuardSDNSFilter/Filters/filter.txt",
    "AdGuard DNS Filter",
    "adguard_dns_filter.txt",
)

DEFAULT_SOURCES: Final[tuple[FilterSource, ...]] = (
    ADGUARD_DNS_FILTER,
    FilterSource(
        "https://adguardteam.github.io/HostlistsRegistry/assets/filter_1.txt",
        "AdGuard Malware Filter",
        "adguard_malware_filter.txt",
    ),
    FilterSource(
        "https://adguardteam.github.io/HostlistsRegistry/assets/filter_2.txt",
        "AdGuard Social Media Filter",
        "adguard_social_filter.txt",
    ),
    FilterSource(
        "https://adguardteam.github.io/HostlistsRegistry/assets/filter_35.txt",
        "AdGuard Mobile Ads Filter",
        "adguard_mobile_filter.txt",
    ),
)

CUSTOM_OUTPUT_NAME: Final[str] = "custom_adguard_filter.txt"
FALLBACK_NAME: Final[str] = "filter_list"

#: url#name, split on the last "#" so URL fragments survive
URL_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(.+)#([^#]+)$")

#: Anything that may not appear in an output filename
UNSAFE_NAME_CHARS: Final[re.Pattern[str]] = re.compile(r"[^A-Za-z0-9._-]")


def clean_name(name: str) -> str:
    """
    Make a list name safe to use as a filename.

    Whitespace runs and any character outside [A-Za-z0-9._-] become "_";
    leading dots are dropped so the name never leaves the output directory.

    Example:
        >>> clean_name("../../My List")
        '_.._My_List'
    """
    name = re.sub(r"\s+", "_", name.strip())
    return UNSAFE_NAME_CHARS.sub("_", name).lstrip(".")


def name_from_locator(locator: str) -> str:
    """
    Derive a list name from a URL or path.

    Example:
        >>> name_from_locator("https://adguardteam.github.io/HostlistsRegistry/assets/filter_1.txt")
        'filter_1'
    """
    basename = locator.rstrip().rsplit("/", 1)[-1]
    stem = re.sub(r"\.[^.]*$", "", basename)
    return clean_name(stem) or FALLBACK_NAME


def output_name(requested: str | None) -> str:
    """Output filename for a custom list; defaults and ".txt" suffix applied."""
    requested = clean_name(requested or "")
    if not requested:
        return CUSTOM_OUTPUT_NAME
    if not requested.endswith(".txt"):
        requested = f"{requested}.txt"
    return requested


def parse_source_line(line: str) -> FilterSource | None:
    """
    Parse one line of a URL list file.

    Returns:
        FilterSource, or None for blank and comment lines

    Example:
        >>> parse_source_line("https://x.test/list.txt#My List")
        FilterSource(locator='https://x.test/list.txt', name='My_List', output_filename='My_List.txt')
    """
    if not line.strip() or line.startswith("#"):
        return None

    match = URL_NAME_PATTERN.search(line)
    if match:
        url, name = match.group(1), match.group(2)
    else:
        url, name = line, None

    url = url.replace("\r", "").strip()
    if not url:
        return None
    name = clean_name(name) if name is not None else name_from_locator(url)
    return FilterSource(url, name or FALLBACK_NAME)


def load_sources(sources_file: str | Path) -> list[FilterSource]:
    """Load sources from a URL list file, skipping comments and empty lines."""
    path = Path(sources_file)
    if not path.is_file():
        raise FileNotFoundError(f"Sources file not found: {sources_file}")

    sources = []
    with open(path, encoding="utf-8-sig", errors="replace") as f:
        for line in f:
            source = parse_source_line(line.rstrip("\n"))
            if source is not None:
                sources.append(source)

    return sources
