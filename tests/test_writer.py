from datetime import datetime

from agh2pihole.reducer import RuleListResult
from agh2pihole.sources import FilterSource, load_sources
from agh2pihole.writer import URL_LIST_FILENAME, whitelist_filename, write_result, write_url_list


def test_whitelist_filename():
    assert whitelist_filename("list.txt") == "list_whitelist.txt"
    assert whitelist_filename("list") == "list_whitelist.txt"


def test_write_result_both_sides(tmp_path):
    written = write_result(tmp_path, "l.txt", RuleListResult(("a.test", "b.test"), ("ok.test",)))
    assert written == [tmp_path / "l.txt", tmp_path / "l_whitelist.txt"]
    assert (tmp_path / "l.txt").read_text(encoding="utf-8") == "a.test\nb.test\n"
    assert (tmp_path / "l_whitelist.txt").read_text(encoding="utf-8") == "ok.test\n"


def test_write_result_skips_empty_sides(tmp_path):
    assert write_result(tmp_path, "l.txt", RuleListResult()) == []
    assert list(tmp_path.iterdir()) == []


def test_url_list_round_trips_through_loader(tmp_path):
    sources = [FilterSource("https://a.test/x.txt", "X_list")]
    path = write_url_list(tmp_path, sources, generated_at=datetime(2024, 1, 2, 3, 4, 5))
    assert path.name == URL_LIST_FILENAME
    text = path.read_text(encoding="utf-8")
    assert "# Generated on 2024-01-02T03:04:05" in text
    assert load_sources(path) == sources


def test_url_with_fragment_round_trips(tmp_path):
    sources = [FilterSource("https://a.test/x.txt#section", "X")]
    path = write_url_list(tmp_path, sources)
    assert load_sources(path) == sources
