import pytest

from agh2pihole.backup import BackupError, load_backup, parse_backup


BACKUP = """\
http:
  address: 0.0.0.0:80
filters:
  - enabled: true
    url: https://adguardteam.github.io/AdGuardSDNSFilter/Filters/filter.txt
    name: AdGuard DNS filter
    id: 1
  - enabled: false
    url: https://example.test/disabled.txt
    name: Disabled list
    id: 2
  - enabled: true
    url: https://example.test/lists/no_name.txt
    id: 3
whitelist_filters: []
user_rules:
  - '||ads.custom.test^'
  - '@@||ok.custom.test^'
  - '! my comment'
  - '||one.test^ and ||two.test^'
dns:
  upstream_dns:
    - https://dns10.quad9.net/dns-query
"""


def test_enabled_filters_only():
    contents = parse_backup(BACKUP)
    assert [(s.locator, s.name) for s in contents.sources] == [
        ("https://adguardteam.github.io/AdGuardSDNSFilter/Filters/filter.txt", "AdGuard_DNS_filter"),
        ("https://example.test/lists/no_name.txt", "no_name"),
    ]


def test_user_rules():
    contents = parse_backup(BACKUP)
    assert contents.user_rules == [
        "||ads.custom.test^",
        "@@||ok.custom.test^",
        "! my comment",
        "||one.test^ and ||two.test^",
    ]


def test_nested_filtering_layout():
    text = """\
filtering:
  filters:
    - enabled: true
      url: https://example.test/a.txt
      name: A
  user_rules:
    - '||x.test^'
"""
    contents = parse_backup(text)
    assert [s.name for s in contents.sources] == ["A"]
    assert contents.user_rules == ["||x.test^"]


def test_missing_sections_are_empty():
    contents = parse_backup("dns:\n  port: 53\n")
    assert contents.sources == []
    assert contents.user_rules == []


def test_not_a_mapping():
    with pytest.raises(BackupError):
        parse_backup("- just\n- a list\n")


def test_invalid_yaml():
    with pytest.raises(BackupError):
        parse_backup("filters: [unclosed\n")


def test_load_backup(tmp_path):
    path = tmp_path / "AdGuardHome.yaml"
    path.write_text(BACKUP, encoding="utf-8")
    assert len(load_backup(path).sources) == 2

    with pytest.raises(FileNotFoundError):
        load_backup(tmp_path / "missing.yaml")


def test_filter_names_cannot_escape_output_dir():
    text = """\
filters:
  - enabled: true
    url: https://example.test/a.txt
    name: ../../escape
"""
    source = parse_backup(text).sources[0]
    assert source.output_filename == "_.._escape.txt"
    assert "/" not in source.output_filename
