import os
import re

from agh2pihole.pihole_script import COMMANDS_FILENAME, render_commands, write_commands


def test_render_commands():
    script = render_commands(["ads.txt", "ads_whitelist.txt"])
    assert script.startswith("#!/bin/bash\n")
    assert "pihole denylist \"$domain\" 'Imported from AdGuard - ads'" in script
    assert "/etc/pihole/adlists/ads.list" in script
    assert 'pihole allowlist "$domain" "Imported from AdGuard"' in script
    assert ">> /etc/pihole/whitelist.txt" in script
    assert script.rstrip().endswith("pihole -g")


def test_filenames_are_shell_quoted():
    script = render_commands(["my list.txt"])
    assert "cat 'my list.txt' |" in script


def test_write_commands(tmp_path):
    (tmp_path / "b.txt").write_text("b.test\n", encoding="utf-8")
    (tmp_path / "a.txt").write_text("a.test\n", encoding="utf-8")
    (tmp_path / "a_whitelist.txt").write_text("ok.test\n", encoding="utf-8")
    (tmp_path / "adguard_filter_urls.txt").write_text("https://x.test/\n", encoding="utf-8")

    path, count = write_commands(tmp_path)

    assert path == tmp_path / COMMANDS_FILENAME
    assert count == 3
    assert os.access(path, os.X_OK)
    script = path.read_text(encoding="utf-8")
    assert "adguard_filter_urls" not in script
    assert script.index("Import blocklist: a\n") < script.index("Import whitelist from a_whitelist.txt")
    assert script.index("Import whitelist from a_whitelist.txt") < script.index("Import blocklist: b\n")


def test_write_commands_empty_dir(tmp_path):
    path, count = write_commands(tmp_path / "out")
    assert count == 0
    assert path.read_text(encoding="utf-8").endswith("pihole -g\n")


def test_command_substitution_in_names_is_not_executed():
    script = render_commands(["evil_$(touch pwned).txt", "x_$(id)_whitelist.txt"])
    for line in script.splitlines():
        unquoted = re.sub(r"'[^']*'", "", line)
        assert "$(" not in unquoted, line
    assert "echo 'Importing blocklist: evil___touch_pwned_'" in script
    assert "> /etc/pihole/adlists/evil___touch_pwned_.list" in script


def test_adlist_target_stays_in_adlists_dir():
    script = render_commands(["../../etc/passwd.txt"])
    assert "/etc/pihole/adlists/passwd.list" in script
    assert "adlists/.." not in script
