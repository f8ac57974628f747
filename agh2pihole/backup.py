"""
backup.py - Read filter subscriptions and user rules from an AdGuard Home backup.

AdGuard Home stores its configuration in AdGuardHome.yaml:

    filters:
      - enabled: true
        url: https://adguardteam.github.io/AdGuardSDNSFilter/Filters/filter.txt
        name: AdGuard DNS filter
        id: 1
    user_rules:
      - '||ads.example.com^'
      - '@@||ok.example.com^'

Newer releases may nest these keys under ``filtering:``; both layouts are
accepted. Only ENABLED filters are returned. The file is parsed as YAML
rather than bounded by indentation, so nested sections cannot mis-bound the
user rule block.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, NamedTuple

import yaml

from agh2pihole.sources import FilterSource, clean_name, name_from_locator


class BackupError(ValueError):
    """The backup file exists but is not a usable AdGuard Home config."""


class BackupContents(NamedTuple):
    """What the pipeline needs from a backup."""
    sources: list[FilterSource]
    user_rules: list[str]


def _section(config: dict[str, Any], key: str) -> Any:
    """Look up a key at top level, then under ``filtering:``."""
    if key in config:
        return config[key]
    filtering = config.get("filtering")
    if isinstance(filtering, dict):
        return filtering.get(key)
    return None


def enabled_filters(config: dict[str, Any]) -> list[FilterSource]:
    """Enabled filter subscriptions, in file order, without duplicate URLs."""
    filters = _section(config, "filters") or []
    if not isinstance(filters, list):
        raise BackupError("'filters' is not a list")

    sources: list[FilterSource] = []
    seen: set[str] = set()
    for item in filters:
        if not isinstance(item, dict) or not item.get("enabled"):
            continue
        url = str(item.get("url") or "").strip()
        if not url or url in seen:
            continue
        seen.add(url)
        name = clean_name(str(item.get("name") or "")) or name_from_locator(url)
        sources.append(FilterSource(url, name))

    return sources


def user_rule_lines(config: dict[str, Any]) -> list[str]:
    """The free-form user rule block, one rule text per element."""
    rules = _section(config, "user_rules")
    if rules is None:
        return []
    if isinstance(rules, str):
        return rules.splitlines()
    if not isinstance(rules, list):
        raise BackupError("'user_rules' is not a list")
    return [str(rule) for rule in rules if rule is not None]


def parse_backup(text: str) -> BackupContents:
    """Parse backup YAML text."""
    try:
        config = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise BackupError(f"Invalid YAML: {e}") from e

    if not isinstance(config, dict):
        raise BackupError("Backup is not a YAML mapping")

    return BackupContents(enabled_filters(config), user_rule_lines(config))


def load_backup(backup_file: str | Path) -> BackupContents:
    """
    Load an AdGuard Home backup from disk.

    Raises:
        FileNotFoundError: backup file missing
        BackupError: file is not valid AdGuard Home YAML
    """
    path = Path(backup_file)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {backup_file}")

    with open(path, encoding="utf-8-sig", errors="replace") as f:
        return parse_backup(f.read())
