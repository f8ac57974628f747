import asyncio

from agh2pihole.downloader import decode_body, fetch_source, is_remote, local_path, new_session
from agh2pihole.sources import FilterSource


def _fetch(source):
    async def run():
        async with new_session(1) as session:
            return await fetch_source(session, source)
    return asyncio.run(run())


def test_is_remote():
    assert is_remote("https://a.test/list.txt")
    assert is_remote("http://a.test/list.txt")
    assert not is_remote("/tmp/list.txt")
    assert not is_remote("file:///tmp/list.txt")


def test_local_path_from_file_url():
    assert str(local_path("file:///tmp/my%20list.txt")) == "/tmp/my list.txt"


def test_decode_body_drops_bom():
    assert decode_body("\ufeff||a.test^\n".encode("utf-8")) == "||a.test^\n"
    assert "\ufffd" in decode_body(b"\xff\xfe bad")


def test_fetch_local_file(tmp_path):
    path = tmp_path / "list.txt"
    path.write_text("||a.test^\n", encoding="utf-8")
    result = _fetch(FilterSource(str(path), "list"))
    assert result.success
    assert result.content == "||a.test^\n"
    assert result.error is None


def test_fetch_missing_local_file(tmp_path):
    result = _fetch(FilterSource(str(tmp_path / "missing.txt"), "missing"))
    assert not result.success
    assert "File not found" in result.error
