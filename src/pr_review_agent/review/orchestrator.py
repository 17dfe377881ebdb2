"""
Review Orchestrator

Drives the review pipeline for one pull request: fetch metadata and
diff, review each changed file with the completion service, resolve
the suggested comments and submit them as a single GitHub review.
"""

import logging
from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from pydantic import ValidationError

from ..config import AppConfig
from ..exceptions import CompletionError, GitHubAPIError, ReviewAgentError, SubmissionError
from ..github.client import GitHubClient
from ..github.parser import DiffParser
from ..llm.client import CompletionClient
from ..llm.prompts import PromptBuilder
from ..llm.response import ResponseParser
from ..models.pr_diff import DiffFile, PullRequestContext
from ..models.review import CompletionResult, PlatformComment, ReviewRequest, RunResult
from .resolver import CommentResolver


logger = logging.getLogger(__name__)


class PullRequestSource(Protocol):
    """Hosting platform operations used by the orchestrator."""

    def fetch_pull_request_context(self, repo_ref: str, pr_number: int) -> PullRequestContext: ...

    def get_pull_request_diff(self, owner: str, repo: str, pr_number: int) -> str: ...

    def create_review(self, owner: str, repo: str, pr_number: int, comments: Sequence[PlatformComment]) -> dict: ...


class CompletionService(Protocol):
    """Completion operation used by the orchestrator."""

    def complete(self, request: ReviewRequest) -> CompletionResult: ...


class ReviewOrchestrator:
    """
    Runs the review pipeline.

    Files are processed sequentially in diff order. A completion failure
    only costs that file its comments; metadata, diff and submission
    failures end the run.
    """

    def __init__(
        self,
        source: PullRequestSource,
        completion: CompletionService,
        diff_parser: Optional[DiffParser] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        response_parser: Optional[ResponseParser] = None,
        resolver: Optional[CommentResolver] = None,
    ):
        self.source = source
        self.completion = completion
        self.diff_parser = diff_parser or DiffParser()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.response_parser = response_parser or ResponseParser()
        self.resolver = resolver or CommentResolver()

    @classmethod
    def from_config(cls, config: AppConfig) -> "ReviewOrchestrator":
        """Build an orchestrator with real GitHub and completion clients."""
        source = GitHubClient(
            config.github.token,
            base_url=config.github.api_base_url,
            timeout=config.github.timeout_seconds,
        )
        completion = CompletionClient(
            api_key=config.openai.api_key,
            model=config.openai.model,
            base_url=config.openai.base_url,
            temperature=config.openai.temperature,
            timeout=config.openai.timeout_seconds,
        )
        return cls(
            source=source,
            completion=completion,
            prompt_builder=PromptBuilder(
                max_diff_lines=config.review.max_diff_lines,
                exclude_patterns=config.review.exclude_patterns,
            ),
            resolver=CommentResolver(
                validate_lines=config.review.validate_lines,
                max_comments_per_file=config.review.max_comments_per_file,
            ),
        )

    def run(self, repo_ref: str, pull_number: int, dry_run: bool = False) -> RunResult:
        """
        Review a pull request and post the resulting comments.

        Args:
            repo_ref: Repository reference in 'owner/repo' format
            pull_number: Pull request number
            dry_run: Build the comment batch without submitting it

        Returns:
            RunResult with counters and the comment batch

        Raises:
            NotFoundError: If the pull request does not exist
            NetworkError: If the diff cannot be fetched
            MalformedDiffError: If the diff cannot be parsed
            SubmissionError: If posting the review fails
        """
        start_time = datetime.now()
        logger.info(f"Starting review of {repo_ref}#{pull_number}")

        context = self.source.fetch_pull_request_context(repo_ref, pull_number)
        diff_text = self.source.get_pull_request_diff(context.owner, context.repo_name, context.pull_number)
        files = self.diff_parser.parse(diff_text)

        result = RunResult(files_total=len(files))
        batch: List[PlatformComment] = []

        for diff_file in files:
            comments = self._review_file(diff_file, context, result)
            batch.extend(comments)

        result.comments = batch

        if not batch:
            logger.info(f"No comments for {context.full_name}#{context.pull_number}, skipping submission")
        elif dry_run:
            logger.info(f"Dry run: {len(batch)} comments not submitted")
        else:
            self._submit(context, batch)
            result.submitted = True
            result.comments_posted = len(batch)

        processing_time = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Review of {context.full_name}#{context.pull_number} done in {processing_time:.2f}s: "
            f"{result.files_reviewed} reviewed, {result.files_skipped} skipped, "
            f"{result.files_failed} failed, {result.comments_posted} comments posted"
        )
        return result

    def _review_file(self, diff_file: DiffFile, context: PullRequestContext, result: RunResult) -> List[PlatformComment]:
        """Build prompt, complete, parse and resolve one file."""
        should_review, reason = self.prompt_builder.should_review(diff_file)
        if not should_review:
            logger.info(f"Skipping {diff_file.display_path}: {reason}")
            result.files_skipped += 1
            return []

        request = self.prompt_builder.build(diff_file, context)
        completion = self._request_completion(request, context)
        if completion is None:
            result.files_failed += 1
            return []

        try:
            candidates = self.response_parser.parse(completion, path=diff_file.path)
            comments = self.resolver.resolve(diff_file, candidates)
        except (ReviewAgentError, ValidationError) as e:
            logger.error(f"Error while processing AI response for {context.full_name}#{context.pull_number} {diff_file.path}: {e}")
            result.files_failed += 1
            return []

        result.files_reviewed += 1
        return comments

    def _request_completion(self, request: ReviewRequest, context: PullRequestContext) -> Optional[CompletionResult]:
        try:
            return self.completion.complete(request)
        except CompletionError as e:
            logger.error(f"Error while getting AI response for {context.full_name}#{context.pull_number} {request.path}: {e}")
            return None

    def _submit(self, context: PullRequestContext, batch: List[PlatformComment]) -> None:
        try:
            self.source.create_review(context.owner, context.repo_name, context.pull_number, batch)
        except GitHubAPIError as e:
            logger.error(f"Error while pushing comments to {context.full_name}#{context.pull_number}: {e}")
            raise SubmissionError(f"Failed to submit {len(batch)} comments: {e}") from e

        logger.info(f"Pushed {len(batch)} comments to {context.full_name}#{context.pull_number}")
