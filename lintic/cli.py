"""Lintic - Automated RuboCop fixes for pull requests using AI.

Lints the Ruby files changed by a pull request, asks a language model to fix
the offenses on the changed lines, and opens one fix pull request per file
against the original PR's branch.

Usage:
    lintic [options]

Options:
    --config PATH         Path to configuration file (default: .linticrc.yaml)
    --repo OWNER/NAME     Repository (default: $LINTIC_GITHUB_REPO)
    --pr NUMBER           Pull request number (default: $LINTIC_GITHUB_PR_NUMBER)
    --model MODEL         Model name (default: codellama)
    --model-uri URI       OpenAI-compatible endpoint (default: local Ollama)
    --branch-prefix STR   Prefix for fix branches (default: lintic/)
    --verbose             Show detailed output
    --quiet               Suppress all output except errors
    --json                Output log in JSON format
    --version             Show version number
    --help                Show this help message

Exit codes:
    0    Run completed, whether or not fixes were made
    1    Missing configuration or a run-level error
    130  Interrupted
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Any
from typing import cast

from lintic import __version__
from lintic.config import LinticConfig
from lintic.config import LinticConfigDict
from lintic.config import load_config_file
from lintic.config import load_env_config
from lintic.config import merge_configs
from lintic.errors import ConfigurationError
from lintic.errors import LinticError
from lintic.github import GitHubClient
from lintic.models import FileOutcome
from lintic.models import RunReport
from lintic.output import Colors
from lintic.output import configure_logger
from lintic.output import logger
from lintic.pipeline import LinticRunner


def create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='lintic',
        description='AI-powered RuboCop fixes for GitHub pull requests',
    )
    parser.add_argument(
        '--config',
        type=Path,
        help='Path to configuration file',
    )
    parser.add_argument(
        '--repo',
        help='Repository as owner/name',
    )
    parser.add_argument(
        '--pr',
        help='Pull request number',
    )
    parser.add_argument(
        '--model',
        help='Model to request fixes from',
    )
    parser.add_argument(
        '--model-uri',
        help='OpenAI-compatible endpoint URI',
    )
    parser.add_argument(
        '--branch-prefix',
        help='Prefix for fix branch names',
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed output',
    )
    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress all output except errors',
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Output log in JSON format',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    return parser


def cli_overrides(args: argparse.Namespace) -> LinticConfigDict:
    """Turn command line flags into a config dictionary."""
    config: dict[str, dict[str, Any]] = {}
    for section, key, value in (
        ('github', 'repo', args.repo),
        ('github', 'pr_number', args.pr),
        ('model', 'name', args.model),
        ('model', 'uri', args.model_uri),
        ('publish', 'branch_prefix', args.branch_prefix),
    ):
        if value:
            config.setdefault(section, {})[key] = value
    return cast(LinticConfigDict, config)


def build_config(args: argparse.Namespace) -> LinticConfig:
    """Assemble and validate the run configuration (CLI > env > file)."""
    file_config = load_config_file(args.config)
    env_config = load_env_config()
    merged = merge_configs(file_config, env_config, cli_overrides(args))
    return LinticConfig.from_dict(merged).validate()


def write_step_output(report: RunReport) -> None:
    """Expose the run results as GitHub Actions step outputs."""
    output_path = os.environ.get('GITHUB_OUTPUT')
    if not output_path:
        return
    urls = report.pull_request_urls
    with open(output_path, 'a', encoding='utf-8') as f:
        f.write(f'fixes-applied={report.fixes_applied}\n')
        f.write(f'pr-url={urls[0] if urls else ""}\n')


def write_step_summary(report: RunReport, repo: str, pr_number: int) -> None:
    """Append a Markdown table of file outcomes to the job summary."""
    summary_path = os.environ.get('GITHUB_STEP_SUMMARY')
    if not summary_path:
        return

    lines = [
        f'## Lintic results for {repo}#{pr_number}',
        '',
        f'Fixes applied: **{report.fixes_applied}**',
        '',
    ]
    if report.files:
        lines.extend(['| File | Outcome | Offenses | Fix PR |', '| --- | --- | --- | --- |'])
        for file_report in report.files:
            detail = file_report.pull_request_url or file_report.error or ''
            lines.append(
                f'| `{file_report.path}` | {file_report.outcome.value} | '
                f'{file_report.offense_count} | {detail} |',
            )
    else:
        lines.append('No Ruby files were changed in this pull request.')

    with open(summary_path, 'a', encoding='utf-8') as f:
        f.write('\n'.join(lines) + '\n')


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    configure_logger(
        verbose=args.verbose or os.environ.get('LINTIC_VERBOSE') == 'true',
        quiet=args.quiet,
        json_output=args.json,
    )

    # Disable colors if not TTY
    if not sys.stdout.isatty() or args.json or logger.ci:
        Colors.disable()

    try:
        config = build_config(args)
    except ConfigurationError as e:
        logger.annotate_error('Lintic Configuration Error', str(e))
        logger.info('Please check your .env file or environment configuration.')
        logger.flush_json()
        return 1

    repo = config.github.repo
    pr_number = cast(int, config.github.pr_number)

    try:
        github = GitHubClient(config.github)
        github.verify_credentials()
        logger.debug('GitHub client configured successfully')
        logger.debug(f'AI client configured for model: {config.model.name}')

        logger.group(f'🚀 Starting Lintic for PR #{pr_number} in {repo}')
        try:
            report = LinticRunner(config, github=github).run(repo, pr_number)
        finally:
            logger.endgroup()

        if report.fixes_applied > 0:
            logger.notice(
                'Lintic Success',
                f'Successfully processed {report.fixes_applied} files with linting fixes',
            )
        else:
            logger.notice('Lintic Complete', 'No linting errors found or fixes needed')

        write_step_output(report)
        write_step_summary(report, repo, pr_number)
        failed = report.count(FileOutcome.FAILED)
        if failed:
            logger.warning(f'{failed} file(s) could not be processed')
        logger.success('Lintic completed successfully!')
        return 0
    except LinticError as e:
        logger.annotate_error('Lintic Error', str(e))
        return 1
    except KeyboardInterrupt:
        logger.info('\nInterrupted')
        return 130
    except Exception as e:
        logger.annotate_error('Unexpected Error', str(e))
        return 1
    finally:
        logger.flush_json()


if __name__ == '__main__':
    sys.exit(main())
