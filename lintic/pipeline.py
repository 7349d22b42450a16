"""The lint-fix pipeline: from a pull request to fix pull requests."""
from __future__ import annotations

from datetime import datetime

from lintic.ai import ChatClient
from lintic.ai import content_changed
from lintic.ai import LintFixer
from lintic.ai import SummaryGenerator
from lintic.config import LinticConfig
from lintic.errors import LinticError
from lintic.files import fetch_file_content
from lintic.files import select_lintable_files
from lintic.github import GitHubClient
from lintic.linter import extract_offenses
from lintic.linter import RubocopRunner
from lintic.models import ChangedFile
from lintic.models import FileOutcome
from lintic.models import FileReport
from lintic.models import ProcessingContext
from lintic.models import RunReport
from lintic.output import logger
from lintic.publish import ChangeApplier

TIMESTAMP_FORMAT = '%Y%m%d%H%M%S'


class LinticRunner:
    """Drives every changed Ruby file of a pull request through lint, fix and publish.

    Files are processed one at a time, in the order GitHub lists them. A
    LinticError raised while handling one file marks that file as failed
    and the run moves on to the next.
    """

    def __init__(
        self,
        config: LinticConfig,
        github: GitHubClient | None = None,
        linter: RubocopRunner | None = None,
        fixer: LintFixer | None = None,
        applier: ChangeApplier | None = None,
    ) -> None:
        self.config = config
        self.github = github or GitHubClient(config.github)
        self.linter = linter or RubocopRunner(config.linter)
        if fixer is None:
            chat = ChatClient(config.model)
            summarizer = SummaryGenerator(chat, max_tokens=config.model.summary_max_tokens)
            fixer = LintFixer(chat, summarizer, max_tokens=config.model.max_tokens)
        self.fixer = fixer
        self.applier = applier or ChangeApplier(self.github, config.publish)

    def process_pr(self, pr_number: int, repo: str) -> int:
        """Process a pull request and return the number of files fixed."""
        return self.run(repo, pr_number).fixes_applied

    def run(self, repo: str, pr_number: int) -> RunReport:
        """Process a pull request and report what happened to each file."""
        logger.info(f'Processing PR #{pr_number} in {repo}')
        report = RunReport()

        pr_files = self.github.list_pull_request_files(repo, pr_number)
        ruby_files = select_lintable_files(pr_files, self.config.linter.extensions)
        if not ruby_files:
            logger.info('No Ruby files found in this PR')
            return report

        pr = self.github.get_pull_request(repo, pr_number)
        context = ProcessingContext(
            repo=repo,
            pr_number=pr_number,
            head_sha=pr.head_sha,
            head_ref=pr.head_ref,
            timestamp=datetime.now().strftime(TIMESTAMP_FORMAT),
        )

        for ordinal, file in enumerate(ruby_files, start=1):
            logger.info(f'Processing file: {file.path}')
            try:
                file_report = self.process_file(context, file, ordinal)
            except LinticError as e:
                logger.error(f'Failed to process {file.path}: {e}')
                file_report = FileReport(
                    path=file.path, outcome=FileOutcome.FAILED, error=str(e),
                )
            report.files.append(file_report)

        if report.fixes_applied > 0:
            logger.success(
                f'Successfully processed {report.fixes_applied} files with linting fixes',
            )
        else:
            logger.info('No linting errors found or no fixes could be applied')
        return report

    def process_file(
        self,
        context: ProcessingContext,
        file: ChangedFile,
        ordinal: int,
    ) -> FileReport:
        """Lint, fix and publish a single file."""
        content = fetch_file_content(self.github, context.repo, file, context.head_sha)
        if not content:
            logger.info(f'No offenses possible in {file.path} (no text content)')
            return FileReport(path=file.path, outcome=FileOutcome.CLEAN)

        offenses = extract_offenses(self.linter.run(content))
        if not offenses:
            logger.info(f'No linting errors found in {file.path}')
            return FileReport(path=file.path, outcome=FileOutcome.CLEAN)

        logger.info(f'Found {len(offenses)} offense(s) in {file.path}')
        for offense in offenses:
            logger.debug(f'  line {offense.line_label}: {offense.rule_id} {offense.message}')

        fix_result = self.fixer.fix(content, offenses, file.patch)
        if not content_changed(content, fix_result.fixed_content):
            logger.info(f'No changes needed for {file.path}')
            return FileReport(
                path=file.path, outcome=FileOutcome.UNCHANGED, offense_count=len(offenses),
            )

        url = self.applier.apply(context, file.path, fix_result, ordinal)
        if fix_result.summary:
            context.add_summary(file.path, fix_result.summary)
        logger.success(f'Applied fixes to {file.path}')
        return FileReport(
            path=file.path,
            outcome=FileOutcome.FIXED,
            offense_count=len(offenses),
            pull_request_url=url,
        )
