#!/usr/bin/env python3
"""
pipeline.py

Main driver: AdGuard filter lists in, Pi-hole domain lists out.

Usage:
    python -m agh2pihole.pipeline list [URL] [-o NAME]
    python -m agh2pihole.pipeline defaults
    python -m agh2pihole.pipeline urls <url_list_file>
    python -m agh2pihole.pipeline backup <AdGuardHome.yaml>
    python -m agh2pihole.pipeline commands

Pipeline stages (per source, sources run concurrently):
1. Fetch the list (URL or local path)
2. Classify each line (blocked / allowed / ignored)
3. Reduce to sorted unique domain lists
Then, after all sources have been joined:
4. Merge sources sharing an output file and write <name>.txt / <name>_whitelist.txt
"""
from __future__ import annotations

import argparse
import asyncio
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

import aiohttp

from agh2pihole.backup import BackupError, load_backup
from agh2pihole.classifier import classify_lines
from agh2pihole.config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT,
    Settings,
)
from agh2pihole.custom_rules import extract_anchored_domains
from agh2pihole.downloader import fetch_source, new_session
from agh2pihole.pihole_script import write_commands
from agh2pihole.reducer import ReduceStats, RuleListResult, merge_results, reduce_with_stats
from agh2pihole.sources import (
    ADGUARD_DNS_FILTER,
    DEFAULT_SOURCES,
    FilterSource,
    load_sources,
    output_name,
)
from agh2pihole.writer import CUSTOM_RULES_FILENAME, write_domains, write_result, write_url_list


@dataclass
class SourceReport:
    """Outcome of converting one source."""
    source: FilterSource
    result: RuleListResult = field(default_factory=RuleListResult)
    stats: ReduceStats | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def convert_text(text: str) -> tuple[RuleListResult, ReduceStats]:
    """Classify and reduce the full text of one list."""
    return reduce_with_stats(classify_lines(text.splitlines()))


async def convert_source(
    session: aiohttp.ClientSession,
    source: FilterSource,
    settings: Settings,
) -> SourceReport:
    """Fetch, classify and reduce one source."""
    fetched = await fetch_source(session, source, settings.timeout, settings.retries)
    if not fetched.success:
        return SourceReport(source, error=fetched.error)

    # Classification is CPU bound; keep the loop free for other downloads
    result, stats = await asyncio.to_thread(convert_text, fetched.content)
    return SourceReport(source, result, stats)


async def convert_all(sources: list[FilterSource], settings: Settings) -> list[SourceReport]:
    """Convert all sources concurrently, bounded by settings.concurrency."""
    semaphore = asyncio.Semaphore(settings.concurrency)

    async def convert_with_semaphore(source: FilterSource) -> SourceReport:
        async with semaphore:
            return await convert_source(session, source, settings)

    async with new_session(settings.concurrency) as session:
        tasks = [convert_with_semaphore(source) for source in sources]
        results = await asyncio.gather(*tasks, return_exceptions=True)

    # Handle exceptions in results
    reports: list[SourceReport] = []
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            reports.append(SourceReport(source, error=str(result) or type(result).__name__))
        else:
            reports.append(result)
    return reports


def write_reports(reports: list[SourceReport], settings: Settings) -> dict[str, int]:
    """
    Join successful reports per output file and write them.

    Sources that share an output filename are merged, so the last one to
    finish never overwrites the others.
    """
    stats = {"files_written": 0, "blocked": 0, "allowed": 0, "empty": 0}

    grouped: dict[str, list[SourceReport]] = {}
    for report in reports:
        if report.success:
            grouped.setdefault(report.source.output_filename, []).append(report)

    for filename, group in grouped.items():
        merged = merge_results(*(report.result for report in group))
        names = ", ".join(report.source.name for report in group)

        written = write_result(settings.output_dir, filename, merged)
        stats["files_written"] += len(written)
        stats["blocked"] += len(merged.blocked)
        stats["allowed"] += len(merged.allowed)

        if merged.is_empty:
            stats["empty"] += 1
            print(f"⚠️  No domains were extracted from {names}", file=sys.stderr)
        else:
            print(f"   ✅ {names}: {len(merged.blocked):,} domains → {settings.output_dir / filename}")
        if merged.allowed:
            print(f"   ✅ {names}: {len(merged.allowed):,} whitelist domains")

    return stats


def run_sources(sources: list[FilterSource], settings: Settings) -> dict[str, int]:
    """Run the full pipeline on a list of sources and write the results."""
    print(f"🔄 Processing {len(sources)} source(s)...")
    for source in sources:
        print(f"   - {source.name}: {source.locator}")

    reports = asyncio.run(convert_all(sources, settings))

    failed = [report for report in reports if not report.success]
    for report in failed:
        print(f"❌ Failed: {report.source.name} ({report.source.locator}): {report.error}", file=sys.stderr)

    if settings.verbose:
        for report in reports:
            if report.stats is not None:
                s = report.stats
                print(f"   {report.source.name}: {s.total_input:,} lines, {s.ignored:,} ignored, "
                      f"{s.blocked_duplicates + s.allowed_duplicates:,} duplicates")

    print("\n✍️  Writing lists...")
    stats = write_reports(reports, settings)
    stats["sources"] = len(sources)
    stats["failed"] = len(failed)
    return stats


def run_backup(backup_file: str, settings: Settings) -> dict[str, int]:
    """
    Process an AdGuard Home YAML backup.

    Writes the enabled filter URLs as adguard_filter_urls.txt, extracts
    domains from user rules into adguard_custom_rules.txt, then converts
    every enabled filter.
    """
    print("📖 Processing AdGuard YAML config file...")
    contents = load_backup(backup_file)

    custom_domains = 0
    if contents.user_rules:
        domains = extract_anchored_domains(contents.user_rules)
        if domains:
            path = settings.output_dir / CUSTOM_RULES_FILENAME
            custom_domains = write_domains(path, domains)
            print(f"   ✅ Extracted {custom_domains:,} custom domains to {path}")
        else:
            print("⚠️  No custom domains were extracted from user rules", file=sys.stderr)
    else:
        print("   No user rules in config file")

    if not contents.sources:
        print("❌ No filter URLs found in the config file.", file=sys.stderr)
        return {"sources": 0, "failed": 0, "files_written": 0, "blocked": 0,
                "allowed": 0, "empty": 0, "custom_domains": custom_domains}

    url_list = write_url_list(settings.output_dir, contents.sources)
    print(f"   ✅ Extracted {len(contents.sources)} filter URLs to {url_list}")

    stats = run_sources(contents.sources, settings)
    stats["custom_domains"] = custom_domains
    return stats


def print_summary(stats: dict[str, int]) -> None:
    """Print formatted summary."""
    print("\n" + "=" * 60)
    print("📊 SUMMARY")
    print("=" * 60)
    print(f"   Sources:          {stats.get('sources', 0):>10,}")
    print(f"   Failed:           {stats.get('failed', 0):>10,}")
    print(f"   Empty lists:      {stats.get('empty', 0):>10,}")
    print(f"   Files written:    {stats.get('files_written', 0):>10,}")
    print(f"   Blocked domains:  {stats.get('blocked', 0):>10,}")
    print(f"   Allowed domains:  {stats.get('allowed', 0):>10,}")
    if "custom_domains" in stats:
        print(f"   Custom domains:   {stats['custom_domains']:>10,}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agh2pihole",
        description="Convert AdGuard filter lists to Pi-hole domain lists",
    )
    parser.add_argument("--outdir", default=DEFAULT_OUTPUT_DIR, help="Output directory for converted lists")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
    parser.add_argument("--retries", type=int, default=DEFAULT_RETRIES, help="Number of attempts per URL")
    parser.add_argument("--concurrency", type=int, default=DEFAULT_CONCURRENCY, help="Max sources processed at once")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print per-source statistics")

    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="Convert one list (AdGuard DNS filter by default)")
    p_list.add_argument("url", nargs="?", help="Filter list URL or local path")
    p_list.add_argument("-o", "--output", help="Output filename (.txt is appended if missing)")

    sub.add_parser("defaults", help="Convert all default AdGuard filter lists")

    p_urls = sub.add_parser("urls", help="Convert every list named in a url#name file")
    p_urls.add_argument("file", help="File with one URL per line")

    p_backup = sub.add_parser("backup", help="Convert the filters and user rules of an AdGuard Home YAML backup")
    p_backup.add_argument("file", help="Path to AdGuardHome.yaml")

    sub.add_parser("commands", help="Generate the Pi-hole import script for the output directory")

    return parser


def select_list_source(url: str | None, output: str | None) -> FilterSource:
    """Source for the `list` command."""
    if url is None:
        if output:
            return FilterSource(ADGUARD_DNS_FILTER.locator, ADGUARD_DNS_FILTER.name, output_name(output))
        return ADGUARD_DNS_FILTER
    url = url.replace("\r", "").strip()
    return FilterSource(url, "Custom AdGuard Filter", output_name(output))


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings(
            output_dir=Path(args.outdir),
            timeout=args.timeout,
            retries=args.retries,
            concurrency=args.concurrency,
            verbose=args.verbose,
        )
    except ValueError as e:
        print(f"❌ ERROR: {e}", file=sys.stderr)
        return 2

    try:
        print("🚀 AdGuard to Pi-hole blocklist converter")
        print("-" * 60)
        start_time = time.time()

        if args.command == "commands":
            path, count = write_commands(settings.output_dir)
            print(f"✅ Generated Pi-hole import commands for {count} list(s) in {path}")
            print("Note: copy the generated files to your Pi-hole server and run the script from their directory.")
            return 0

        if args.command == "list":
            stats = run_sources([select_list_source(args.url, args.output)], settings)
        elif args.command == "defaults":
            stats = run_sources(list(DEFAULT_SOURCES), settings)
        elif args.command == "urls":
            sources = load_sources(args.file)
            if not sources:
                print("No URLs found in sources file", file=sys.stderr)
                return 1
            stats = run_sources(sources, settings)
        else:
            stats = run_backup(args.file, settings)
            if stats["sources"] == 0:
                return 1

        print_summary(stats)
        print(f"\n⏱️  Total time: {time.time() - start_time:.1f}s")
        print(f"Your converted lists are in the '{settings.output_dir}' directory.")

        # Return error if too many failures (>50%)
        if stats["failed"] > stats["sources"] // 2:
            return 1
        return 0

    except (FileNotFoundError, BackupError) as e:
        print(f"❌ ERROR: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        print(f"\n❌ ERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
