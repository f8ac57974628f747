import pytest

from agh2pihole.sources import (
    clean_name,
    CUSTOM_OUTPUT_NAME,
    DEFAULT_SOURCES,
    FilterSource,
    load_sources,
    name_from_locator,
    output_name,
    parse_source_line,
)


def test_parse_url_with_name():
    source = parse_source_line("https://x.test/list.txt#My Filter List\r")
    assert source == FilterSource("https://x.test/list.txt", "My_Filter_List")
    assert source.output_filename == "My_Filter_List.txt"


def test_parse_url_without_name_uses_basename():
    source = parse_source_line("  https://x.test/lists/filter_35.txt  ")
    assert source.locator == "https://x.test/lists/filter_35.txt"
    assert source.name == "filter_35"


def test_parse_skips_comments_and_blanks():
    assert parse_source_line("# heading") is None
    assert parse_source_line("") is None
    assert parse_source_line("   ") is None


def test_name_from_locator():
    assert name_from_locator("https://a.test/path/hosts") == "hosts"
    assert name_from_locator("/tmp/lists/my.list.txt") == "my.list"
    assert name_from_locator("https://a.test/") == "filter_list"


def test_output_name():
    assert output_name(None) == CUSTOM_OUTPUT_NAME
    assert output_name("  ") == CUSTOM_OUTPUT_NAME
    assert output_name("mine") == "mine.txt"
    assert output_name("mine.txt\r") == "mine.txt"


def test_default_sources_have_distinct_outputs():
    names = [s.output_filename for s in DEFAULT_SOURCES]
    assert names[0] == "adguard_dns_filter.txt"
    assert len(set(names)) == 4


def test_load_sources(tmp_path):
    path = tmp_path / "urls.txt"
    path.write_text(
        "# AdGuard filter URLs\n"
        "\n"
        "https://a.test/one.txt#One\r\n"
        "https://a.test/two.txt\n",
        encoding="utf-8",
    )
    sources = load_sources(path)
    assert [(s.locator, s.name) for s in sources] == [
        ("https://a.test/one.txt", "One"),
        ("https://a.test/two.txt", "two"),
    ]


def test_load_sources_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_sources(tmp_path / "nope.txt")


def test_clean_name_keeps_names_inside_output_dir():
    assert clean_name("../../escape") == "_.._escape"
    assert clean_name("a/b\\c") == "a_b_c"
    assert clean_name("  My List $(x)\r") == "My_List___x_"
    assert clean_name("...") == ""


def test_parse_keeps_url_fragment():
    source = parse_source_line("https://x.test/list.txt#frag#My List")
    assert source.locator == "https://x.test/list.txt#frag"
    assert source.name == "My_List"


def test_output_name_is_sanitised():
    assert output_name("../up") == "_up.txt"
