"""
Command Line Entry Point

Usage: pr-review-agent <owner>/<repo> <pr_number>
Example: pr-review-agent octocat/hello-world 1
"""

import argparse
import logging
from typing import List, Optional

from .config import AppConfig, ConfigManager
from .exceptions import ReviewAgentError, SetupError
from .github.client import parse_repo_ref
from .review.orchestrator import ReviewOrchestrator


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_SETUP = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pr-review-agent",
        description="Review a GitHub pull request with a language model and post line comments.",
    )
    parser.add_argument("repo", help="Repository in the format <owner>/<repo>")
    parser.add_argument("pr_number", type=int, help="Pull request number")
    parser.add_argument("--config", help="YAML config file (tokens still come from the environment)")
    parser.add_argument("--model", help="Override the completion model")
    parser.add_argument("--dry-run", action="store_true", help="Log the comments instead of posting them")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = AppConfig.from_yaml(args.config) if args.config else AppConfig.from_env()
        manager = ConfigManager(config)

        overrides = {}
        if args.model:
            overrides['openai.model'] = args.model
        if args.log_level:
            overrides['logging.level'] = args.log_level
        if overrides:
            manager.update_config(**overrides)
    except (SetupError, ValueError) as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(str(e))
        return EXIT_SETUP

    try:
        parse_repo_ref(args.repo)
    except ValueError as e:
        logger.error(str(e))
        return EXIT_SETUP
    if args.pr_number <= 0:
        logger.error(f"PR number must be positive, got {args.pr_number}")
        return EXIT_SETUP

    orchestrator = ReviewOrchestrator.from_config(manager.config)

    try:
        result = orchestrator.run(args.repo, args.pr_number, dry_run=args.dry_run)
    except ReviewAgentError as e:
        logger.error(f"Review of {args.repo}#{args.pr_number} failed: {e}")
        return EXIT_FAILURE

    if args.dry_run:
        for comment in result.comments:
            logger.info(f"{comment.path}:{comment.line}: {comment.body}")

    return EXIT_OK
