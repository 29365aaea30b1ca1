"""CLI Main Entry Point"""

import asyncio
import dataclasses
import logging
import sys

from aic2 import COMMIT, REVIEW
from aic2.audit import AuditLogger
from aic2.config import Config, load_config
from aic2.errors import ConfigurationError
from aic2.git import GitAnalyzer, GitError
from aic2.llm import get_adapter
from aic2.llm.models import DisplayItem
from aic2.output import print_error, Spinner

from aic2.cli.args import parse_args
from aic2.cli.commands import display_config, run_install_completion
from aic2.cli.utils import collect_items, display_items

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _apply_overrides(args, config: Config) -> None:
    """CLI args take precedence over the rc file."""
    if args.generate is not None:
        config.generate = args.generate
    if args.locale:
        config.locale = args.locale
    if args.type:
        config.type = args.type


def _handle_subcommands(args):
    """Handle subcommands that exit early.

    Returns:
        tuple: (exit_code, should_exit) - exit_code if should_exit is True
    """
    if args.install_completion:
        return run_install_completion(), True
    if args.display_config:
        return display_config(), True
    return 0, False


def _report(items: list[DisplayItem], is_pipe: bool, strict: bool) -> int:
    """Print the items and pick the exit code."""
    candidates = [item for item in items if not item.is_error]
    errors = [item for item in items if item.is_error]

    if is_pipe:
        if candidates:
            print(candidates[0].value)
        for item in errors:
            print_error(item.name)
    else:
        display_items(items)

    return 1 if strict and errors else 0


def _generate_flow(args, config: Config, provider: str) -> int:
    mode = REVIEW if args.review else COMMIT

    try:
        git = GitAnalyzer()
        payload = git.get_staged_diff(mode)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Staged files: %s", ", ".join(git.get_staged_files()))
    except GitError as e:
        print_error(str(e))
        return 1

    if not payload.diff.strip():
        print_error("No staged changes. Run 'git add' first.")
        return 1

    try:
        provider_config = config.provider_config(provider)
        adapter = get_adapter(
            provider,
            prompt_options=config.prompt_options(),
            audit_logger=AuditLogger(config.logs_dir, enabled=config.logging),
        )
    except ConfigurationError as e:
        print_error(str(e))
        return 1

    if args.model:
        provider_config = dataclasses.replace(provider_config, model=args.model)
    if args.no_body:
        provider_config = dataclasses.replace(provider_config, include_body=False)

    if mode == REVIEW:
        stream = adapter.generate_code_review(payload, provider_config)
    else:
        stream = adapter.generate_commit_message(payload, provider_config)

    action = "reviewing" if mode == REVIEW else "writing"
    with Spinner(f"{adapter.display_label(provider_config)} is {action}..."):
        items = asyncio.run(collect_items(stream))

    return _report(items, is_pipe=not sys.stdout.isatty(), strict=args.strict)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    _configure_logging(args.verbose)

    exit_code, should_exit = _handle_subcommands(args)
    if should_exit:
        return exit_code

    config = load_config()
    _apply_overrides(args, config)

    provider = args.provider or config.provider
    if not provider:
        print_error('No provider selected. Use -p/--provider or set "provider" in .aic2rc')
        return 1

    return _generate_flow(args, config, provider)
