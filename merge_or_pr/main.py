"""merge-or-pr entry point.

Merges the configured head into the target branch, or opens a pull
request when the merge conflicts. Usage: merge-or-pr [--config PATH]
[--check].
"""

import argparse
import logging
import sys
from pathlib import Path

from merge_or_pr.adapters.github import GitHubAdapter
from merge_or_pr.config import DEFAULT_CONFIG_PATH, ConfigError, LoggingConfig, load_config
from merge_or_pr.logging import MergeOrPrLogging
from merge_or_pr.orchestrator import MergeOrPr, MergeOrPrError
from merge_or_pr.outputs import StepOutputs


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="merge-or-pr",
        description="Merge a commit into a branch, or open a pull request if the merge conflicts",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Path to YAML config file (optional; Action inputs and env override it)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: load config, run merge-or-PR, map the result to an exit
    code."""
    args = parse_args(argv)
    MergeOrPrLogging(LoggingConfig()).setup()
    log = logging.getLogger("merge_or_pr")

    try:
        config = load_config(args.config)
    except ConfigError as e:
        log.error("%s", e)
        return 1

    MergeOrPrLogging(config.logging).setup()

    if args.check:
        print("Config OK:", config.action.repository, config.action.target_branch, config.action.head_to_merge)
        return 0

    adapter = GitHubAdapter(token=config.action.repo_token, api_url=config.action.api_url)
    try:
        outcome = MergeOrPr(adapter, config.action, StepOutputs.from_env()).run()
    except MergeOrPrError as e:
        log.error("%s", e)
        return 1
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 1
    finally:
        adapter.close()

    if outcome.pr_created:
        log.info("Merge conflicted, opened pull request #%s: %s", outcome.pr_number, outcome.pr_url)
    else:
        log.info("Merged without a pull request")
    return 0


if __name__ == "__main__":
    sys.exit(main())
