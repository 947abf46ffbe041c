#!/usr/bin/env python3
"""
Ad Group Image Generation - Main Entry Point

Generates creative images for Google Ads ad groups, resuming across runs when
a run hits its time budget.
"""

import argparse
import logging
import sys

from .ad_group_processing import AdGroupProcessor
from .config import Config
from .logger import GenerationLogger
from .state import FollowUpScheduler, YamlStateStore


def _parse_args(argv):
    parser = argparse.ArgumentParser(description="Generate creative images for Google Ads ad groups.")
    parser.add_argument(
        "command",
        nargs="?",
        choices=["run", "triggered"],
        default="run",
        help="run: fresh run from the first ad group. triggered: resume a scheduled follow-up run if one is due.",
    )
    parser.add_argument("--config", default="", help="YAML config file overriding the defaults.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv=None):
    """Entry point for the application."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    config = Config.from_yaml(args.config) if args.config else Config()
    logger = GenerationLogger(logging.DEBUG if args.verbose else logging.INFO, log_file=config.LOG_FILE)

    try:
        if args.command == "triggered":
            # Checked before any API client is created, cron calls this often
            scheduler = FollowUpScheduler(YamlStateStore(config.STATE_FILE))
            if not scheduler.is_follow_up_due():
                logger.debug("No follow-up run is due")
                return
            AdGroupProcessor(config, logger).triggered_run()
        else:
            AdGroupProcessor(config, logger).manually_run()
    finally:
        logger.close()


if __name__ == "__main__":
    main()
