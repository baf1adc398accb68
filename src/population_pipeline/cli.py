"""Command-line interface for orchestrating the pipeline.

Provides subcommands: `fetch`, `tree`, `stats`, `list`, and `all`. Each
command is implemented as a `cmd_*` function that accepts an argparse
namespace.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from population_pipeline.config import Settings, get_settings
from population_pipeline.logging_config import configure_logging
from population_pipeline.db import get_client, get_db

# INGEST
from population_pipeline.ingest.fetch_datausa import download_payload, fetch_payload, read_payload
from population_pipeline.ingest.parse_datausa import parse_payload_to_ddf

# CLEAN
from population_pipeline.clean.transform import clean_raw_ddf
from population_pipeline.clean.validate import validate_ddf

# STORE
from population_pipeline.store import (
    COLLECTION,
    MAX_PAGE_SIZE,
    SORTABLE_FIELDS,
    ensure_indexes,
    find_page,
    load_records,
    upsert_docs,
)

# AGGREGATE
from population_pipeline.aggregate.formatting import format_number
from population_pipeline.aggregate.growth import yearly_growth_by_entity
from population_pipeline.aggregate.summary import dataset_overview, summary_statistics
from population_pipeline.aggregate.tree import build_tree
from population_pipeline.models import Record

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _collection(s: Settings) -> tuple[Any, Any]:
    client = get_client(s.mongo_uri, tls=s.mongo_tls)
    return client, get_db(client, s.mongo_db)[COLLECTION]


def _records_from_payload(payload: dict[str, Any]) -> list[Record]:
    """Run a payload through parse → clean → validate and return records."""
    ddf = clean_raw_ddf(parse_payload_to_ddf(payload))
    docs, _ = validate_ddf(ddf)
    return [d.to_record() for d in docs]


def _page_size(value: str) -> int:
    """argparse type for `--limit`: an integer in 1..MAX_PAGE_SIZE."""
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if not 1 <= n <= MAX_PAGE_SIZE:
        raise argparse.ArgumentTypeError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    return n


def _write_json(obj: Any, out: Path | None) -> None:
    text = json.dumps(obj, indent=2, default=str)
    if out is None:
        sys.stdout.write(text + "\n")
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text + "\n", encoding="utf-8")
    log.info("Wrote %s", out)


# --------------------------------------------------
# FETCH
# --------------------------------------------------
def cmd_fetch(args: argparse.Namespace) -> None:
    """Download, clean and validate DataUSA records and upsert them into Mongo.

    Args:
        args: argparse namespace with `force`.
    """
    s = get_settings()
    path = download_payload(s.datausa_url, s.data_dir, timeout=s.request_timeout, force=args.force)

    ddf = clean_raw_ddf(parse_payload_to_ddf(read_payload(path)))
    docs, bad = validate_ddf(ddf)
    if not docs:
        raise RuntimeError("DataUSA payload contained no valid records.")

    client, coll = _collection(s)
    try:
        ensure_indexes(coll)
        written = upsert_docs(coll, docs)
    finally:
        client.close()

    log.info("Fetch completed: stored=%d rejected=%d", written, bad)


# --------------------------------------------------
# TREE
# --------------------------------------------------
def cmd_tree(args: argparse.Namespace) -> None:
    """Build the entity/year tree from cached records and write it as JSON.

    When the cache is empty and `--fallback-api` is set, records are taken
    directly from the API without being stored.
    """
    s = get_settings()
    client, coll = _collection(s)
    try:
        records = load_records(coll, args.start_year, args.end_year)
    finally:
        client.close()

    if not records and args.fallback_api:
        log.info("No cached records; fetching directly from DataUSA.")
        records = _records_from_payload(fetch_payload(s.datausa_url, timeout=s.request_timeout))

    tree = build_tree(records)
    log.info("Tree built: %d entities from %d records", len(tree.children), len(records))
    _write_json(tree.to_dict(), args.out)


# --------------------------------------------------
# STATS
# --------------------------------------------------
def cmd_stats(args: argparse.Namespace) -> None:
    """Write summary statistics, the overview and yearly growth as JSON."""
    s = get_settings()
    client, coll = _collection(s)
    try:
        records = load_records(coll)
    finally:
        client.close()

    summary = summary_statistics(records)
    log.info(
        "Summary: %s records, metric range %s..%s",
        format_number(summary.total_records),
        format_number(summary.min_metric),
        format_number(summary.max_metric),
    )
    _write_json(
        {
            "summary": summary.model_dump(),
            "overview": dataset_overview(records).model_dump(),
            "yearly_data": yearly_growth_by_entity(records),
        },
        args.out,
    )


# --------------------------------------------------
# LIST
# --------------------------------------------------
def cmd_list(args: argparse.Namespace) -> None:
    """Print one page of cached records with pagination metadata."""
    s = get_settings()
    client, coll = _collection(s)
    try:
        docs, pagination = find_page(coll, args.page, args.limit, args.sort_by, args.order)
    finally:
        client.close()

    _write_json({"records": docs, "pagination": pagination.model_dump()}, None)


# --------------------------------------------------
# ALL
# --------------------------------------------------
def cmd_all(args: argparse.Namespace) -> None:
    """Convenience: run fetch → tree with the provided args."""
    cmd_fetch(args)
    cmd_tree(args)


# --------------------------------------------------
# CLI
# --------------------------------------------------
def _add_tree_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--start-year", type=int, default=None)
    p.add_argument("--end-year", type=int, default=None)
    p.add_argument("--fallback-api", action="store_true")
    p.add_argument("--out", type=Path, default=None)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="population-pipeline")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_fetch = sub.add_parser("fetch")
    p_fetch.add_argument("--force", action="store_true")

    p_tree = sub.add_parser("tree")
    _add_tree_args(p_tree)

    p_stats = sub.add_parser("stats")
    p_stats.add_argument("--out", type=Path, default=None)

    p_list = sub.add_parser("list")
    p_list.add_argument("--page", type=int, default=1)
    p_list.add_argument("--limit", type=_page_size, default=10)
    p_list.add_argument("--sort-by", choices=sorted(SORTABLE_FIELDS), default="year")
    p_list.add_argument("--order", choices=["asc", "desc"], default="desc")

    p_all = sub.add_parser("all")
    p_all.add_argument("--force", action="store_true")
    _add_tree_args(p_all)

    return p


COMMANDS = {
    "fetch": cmd_fetch,
    "tree": cmd_tree,
    "stats": cmd_stats,
    "list": cmd_list,
    "all": cmd_all,
}


def main() -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    configure_logging(Path("logs/pipeline.log"), stream=sys.stderr)

    args = build_parser().parse_args()
    COMMANDS[args.cmd](args)


if __name__ == "__main__":
    main()
