from __future__ import annotations

import argparse
import logging
from pathlib import Path

from common.config import DEFAULT_CONFIG_PATH, MonitorConfig, load_secrets, load_yaml_config
from common.errors import PolicyWatchError
from common.logger import get_logger
from pipeline.monitor import PolicyMonitor

log = get_logger(__name__)

_PACKAGES = {"policywatch", "common", "ingestion", "diffing", "notify", "storage", "pipeline"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check a policy document for section changes and notify."
    )
    parser.add_argument(
        "--config", type=str, default=str(DEFAULT_CONFIG_PATH), help="YAML config file"
    )
    parser.add_argument(
        "--env_file", type=str, default=".env", help="File with notification secrets"
    )
    parser.add_argument(
        "--source_file",
        type=str,
        default="",
        help="Read the current document from this file instead of fetching it",
    )
    parser.add_argument(
        "--snapshot", type=str, default="", help="Override the snapshot file path"
    )
    parser.add_argument(
        "--provider", type=str, default=None, choices=["git", "difflib"]
    )
    parser.add_argument(
        "--dry_run",
        action="store_true",
        help="Print the report; do not notify or update the snapshot",
    )
    parser.add_argument("--progress", action="store_true", help="Show diff progress bar")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        for name in list(logging.root.manager.loggerDict):
            if name.split(".")[0] in _PACKAGES:
                logging.getLogger(name).setLevel(logging.DEBUG)

    try:
        settings = load_yaml_config(Path(args.config))
        if args.source_file:
            settings.document.source_path = Path(args.source_file)
        if args.snapshot:
            settings.app.snapshot_path = Path(args.snapshot)
        if args.provider:
            settings.diff.provider = args.provider

        config = MonitorConfig(settings=settings, secrets=load_secrets(args.env_file))
        result = PolicyMonitor.from_config(config).run(
            dry_run=args.dry_run, progress=args.progress
        )
    except PolicyWatchError as e:
        log.error("Run failed: %s", e)
        return 1

    log.info("Run finished: %s (%d changed sections)", result.status, len(result.changed_keys))
    if args.dry_run and result.report:
        print("\n=== REPORT ===\n")
        print(result.report)
        print("\n=== LINKS ===\n")
        for url in result.links:
            print(f"- {url}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
