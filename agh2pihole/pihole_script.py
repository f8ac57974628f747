"""
pihole_script.py - Generate a shell script that imports converted lists into Pi-hole.

The script is meant to be copied to the Pi-hole host together with the list
files and run from the directory holding them:

    *_whitelist.txt  →  pihole allowlist <domain>   (+ /etc/pihole/whitelist.txt)
    other *.txt      →  pihole denylist <domain>    (+ /etc/pihole/adlists/<name>.list)

Gravity is rebuilt after every list and once more at the end.
"""
from __future__ import annotations

import shlex
import stat
from pathlib import Path
from typing import Final, Iterable

from agh2pihole.sources import clean_name
from agh2pihole.writer import URL_LIST_FILENAME


COMMANDS_FILENAME: Final[str] = "pihole_import_commands.sh"
ADLISTS_DIR: Final[str] = "/etc/pihole/adlists"

HEADER: Final[str] = """\
#!/bin/bash

# Commands to import converted lists to Pi-hole
# Run this script on your Pi-hole server

"""

ALLOWLIST_TEMPLATE: Final[str] = """\
# Import whitelist from {label}
echo {msg_import}
cat {quoted} | while read domain; do
    [[ -z "$domain" || "$domain" =~ ^# ]] && continue  # Skip empty lines and comments
    echo "Adding $domain to allowlist"
    pihole allowlist "$domain" "Imported from AdGuard"
done

# Alternative method: Direct whitelist file modification
echo "Adding domains to whitelist.txt..."
cat {quoted} | grep -v "^#" | grep -v "^$" >> /etc/pihole/whitelist.txt
echo "Whitelist entries added. Restarting Pi-hole services..."
pihole restartdns

"""

DENYLIST_TEMPLATE: Final[str] = """\
# Import blocklist: {label}
echo {msg_import}
echo {msg_adding}
cat {quoted} | while read domain; do
    [[ -z "$domain" || "$domain" =~ ^# ]] && continue  # Skip empty lines and comments
    echo "Adding $domain to denylist"
    pihole denylist "$domain" {comment}
done

# Alternative method: Adding as an adlist
echo {msg_adlist}
# First create a local file with the domains in adlist format
mkdir -p /etc/pihole/adlists/
cat {quoted} | grep -v "^#" | grep -v "^$" > {adlist_path}
echo "Update gravity to apply changes"
pihole -g

"""

FOOTER: Final[str] = """\
# Update gravity after importing all lists
pihole -g
"""


def is_whitelist(filename: str) -> bool:
    return "whitelist" in filename


def list_files(output_dir: Path) -> list[Path]:
    """Domain list files in the output directory, sorted by name."""
    return sorted(
        path for path in output_dir.glob("*.txt")
        if path.is_file() and path.name != URL_LIST_FILENAME
    )


def render_commands(filenames: Iterable[str]) -> str:
    """
    Render the full import script for the given list file names.

    Every value derived from a filename is shell-quoted, and the adlist
    target name is reduced to [A-Za-z0-9._-] so it stays inside ADLISTS_DIR.
    """
    parts = [HEADER]
    for filename in filenames:
        quoted = shlex.quote(filename)
        if is_whitelist(filename):
            parts.append(ALLOWLIST_TEMPLATE.format(
                label=clean_name(filename),
                msg_import=shlex.quote(f"Importing whitelist: {filename}"),
                quoted=quoted,
            ))
        else:
            list_name = clean_name(Path(filename).stem) or "list"
            parts.append(DENYLIST_TEMPLATE.format(
                label=list_name,
                msg_import=shlex.quote(f"Importing blocklist: {list_name}"),
                msg_adding=shlex.quote(f"Adding domains from {list_name} to denylist..."),
                comment=shlex.quote(f"Imported from AdGuard - {list_name}"),
                msg_adlist=shlex.quote(f"Creating a local adlist file for {list_name}..."),
                adlist_path=shlex.quote(f"{ADLISTS_DIR}/{list_name}.list"),
                quoted=quoted,
            ))
    parts.append(FOOTER)
    return "".join(parts)


def write_commands(output_dir: Path) -> tuple[Path, int]:
    """
    Generate pihole_import_commands.sh in the output directory.

    Returns:
        (script path, number of list files covered)
    """
    files = list_files(output_dir)
    path = output_dir / COMMANDS_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(render_commands(file.name for file in files))

    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path, len(files)
