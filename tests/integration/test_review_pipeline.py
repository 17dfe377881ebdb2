"""
End-to-End Pipeline Tests

Runs the ReviewOrchestrator against in-memory GitHub and completion
doubles, from raw diff text to the submitted review batch.
"""

import pytest

from pr_review_agent.config import AppConfig
from pr_review_agent.exceptions import (
    CompletionError,
    GitHubAPIError,
    MalformedDiffError,
    MalformedResponseError,
    NotFoundError,
    SubmissionError,
)
from pr_review_agent.github.client import GitHubClient
from pr_review_agent.llm.client import CompletionClient
from pr_review_agent.llm.response import ResponseParser
from pr_review_agent.models.pr_diff import PullRequestContext
from pr_review_agent.review.orchestrator import ReviewOrchestrator

from conftest import MULTI_FILE_DIFF, SINGLE_FILE_DIFF, completion


class FakeGitHub:
    """In-memory PullRequestSource."""

    def __init__(self, diff_text, submit_error=None, missing=False):
        self.diff_text = diff_text
        self.submit_error = submit_error
        self.missing = missing
        self.reviews = []

    def fetch_pull_request_context(self, repo_ref, pr_number):
        if self.missing:
            raise NotFoundError("GitHub API error: 404 - Not Found", status_code=404)
        owner, repo = repo_ref.split("/")
        return PullRequestContext(owner=owner, repo_name=repo, pull_number=pr_number, title="Title", description=None)

    def get_pull_request_diff(self, owner, repo, pr_number):
        return self.diff_text

    def create_review(self, owner, repo, pr_number, comments):
        if self.submit_error:
            raise self.submit_error
        self.reviews.append((owner, repo, pr_number, list(comments)))
        return {"id": len(self.reviews)}


class FakeCompletion:
    """CompletionService answering per path; exceptions are raised."""

    def __init__(self, answers):
        self.answers = answers
        self.requests = []

    def complete(self, request):
        self.requests.append(request)
        answer = self.answers.get(request.path, '{"reviews": []}')
        if isinstance(answer, Exception):
            raise answer
        return completion(answer)


class TestReviewPipeline:
    """End-to-end scenarios for ReviewOrchestrator.run."""

    def test_added_lines_are_numbered_in_prompt(self):
        github = FakeGitHub(SINGLE_FILE_DIFF)
        llm = FakeCompletion({})

        ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)

        (request,) = llm.requests
        assert "10 +def add(a, b):\n11 +    return a + b\n12 +" in request.prompt

    def test_comments_are_submitted_once(self):
        github = FakeGitHub(MULTI_FILE_DIFF)
        llm = FakeCompletion({
            "src/app.py": '{"reviews": [{"lineNumber": 2, "reviewComment": "Unused import"},'
                          ' {"lineNumber": 99, "reviewComment": "Not in diff"}]}',
            "docs/guide.md": '{"reviews": [{"lineNumber": 3, "reviewComment": "Capitalize"}]}',
        })

        result = ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)

        assert result.comments_posted == 2
        assert result.submitted
        assert result.files_total == 4
        assert result.files_reviewed == 2
        assert result.files_skipped == 2
        (review,) = github.reviews
        owner, repo, pr_number, comments = review
        assert (owner, repo, pr_number) == ("octo-org", "octo-repo", 42)
        assert [(c.path, c.line, c.body) for c in comments] == [
            ("src/app.py", 2, "Unused import"),
            ("docs/guide.md", 3, "Capitalize"),
        ]

    def test_completion_failure_only_affects_that_file(self):
        github = FakeGitHub(MULTI_FILE_DIFF)
        llm = FakeCompletion({
            "src/app.py": CompletionError("timeout", path="src/app.py"),
            "docs/guide.md": '{"reviews": [{"lineNumber": 4, "reviewComment": "Trailing text"}]}',
        })

        result = ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)

        assert result.files_failed == 1
        assert result.files_reviewed == 1
        assert [r.path for r in llm.requests] == ["src/app.py", "docs/guide.md"]
        assert [(c.path, c.line) for c in github.reviews[0][3]] == [("docs/guide.md", 4)]

    def test_empty_batch_is_never_submitted(self):
        github = FakeGitHub(MULTI_FILE_DIFF)
        llm = FakeCompletion({"src/app.py": CompletionError("down"), "docs/guide.md": CompletionError("down")})

        result = ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)

        assert github.reviews == []
        assert result.comments_posted == 0
        assert not result.submitted

    def test_deleted_file_never_reaches_prompt_builder(self):
        github = FakeGitHub(MULTI_FILE_DIFF)
        llm = FakeCompletion({})

        ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)

        prompted = [r.path for r in llm.requests]
        assert "/dev/null" not in prompted
        assert all("old.txt" not in r.prompt for r in llm.requests)

    def test_empty_reviews_produce_no_comments(self):
        github = FakeGitHub(SINGLE_FILE_DIFF)
        llm = FakeCompletion({"src/calc.py": '{"reviews":[]}'})

        result = ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)

        assert result.comments == []
        assert github.reviews == []

    def test_malformed_response_produces_no_comments(self):
        github = FakeGitHub(SINGLE_FILE_DIFF)
        llm = FakeCompletion({"src/calc.py": "Sure! Here is my review: looks fine"})

        result = ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)

        assert result.files_reviewed == 1
        assert result.comments == []

    def test_dry_run_does_not_submit(self):
        github = FakeGitHub(SINGLE_FILE_DIFF)
        llm = FakeCompletion({"src/calc.py": '{"reviews": [{"lineNumber": 11, "reviewComment": "Add type hints"}]}'})

        result = ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42, dry_run=True)

        assert github.reviews == []
        assert result.comments_posted == 0
        assert [(c.path, c.line) for c in result.comments] == [("src/calc.py", 11)]

    def test_submission_failure_is_terminal(self):
        github = FakeGitHub(SINGLE_FILE_DIFF, submit_error=GitHubAPIError("422", status_code=422))
        llm = FakeCompletion({"src/calc.py": '{"reviews": [{"lineNumber": 10, "reviewComment": "Name"}]}'})

        with pytest.raises(SubmissionError):
            ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)

    def test_malformed_diff_is_terminal(self):
        github = FakeGitHub("this is not a diff")
        llm = FakeCompletion({})

        with pytest.raises(MalformedDiffError):
            ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)
        assert llm.requests == []

    def test_missing_pull_request_propagates(self):
        with pytest.raises(NotFoundError):
            ReviewOrchestrator(FakeGitHub("", missing=True), FakeCompletion({})).run("octo-org/octo-repo", 404)

    def test_empty_diff_completes_without_work(self):
        github = FakeGitHub("")
        llm = FakeCompletion({})

        result = ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)

        assert result.files_total == 0
        assert llm.requests == []
        assert github.reviews == []


class TestFromConfig:

    def test_builds_real_clients_from_config(self):
        config = AppConfig.from_env({
            "GITHUB_TOKEN": "ghp_test",
            "OPENAI_API_KEY": "sk-test",
            "OPENAI_API_MODEL": "gpt-4o-mini",
            "VALIDATE_LINES": "false",
            "MAX_COMMENTS_PER_FILE": "4",
        })

        orchestrator = ReviewOrchestrator.from_config(config)

        assert isinstance(orchestrator.source, GitHubClient)
        assert isinstance(orchestrator.completion, CompletionClient)
        assert orchestrator.completion.model == "gpt-4o-mini"
        assert orchestrator.resolver.validate_lines is False
        assert orchestrator.resolver.max_comments_per_file == 4


class FailingResponseParser(ResponseParser):
    """ResponseParser that cannot decode answers for the given paths."""

    def __init__(self, failing_paths):
        super().__init__()
        self.failing_paths = failing_paths

    def parse(self, raw_completion, path=""):
        if path in self.failing_paths:
            raise MalformedResponseError(f"cannot decode answer for {path}")
        return super().parse(raw_completion, path=path)


class TestPerFileIsolation:

    def test_undecodable_answer_keeps_other_files_comments(self):
        github = FakeGitHub(MULTI_FILE_DIFF)
        llm = FakeCompletion({
            "src/app.py": '{"reviews": [{"lineNumber": 2, "reviewComment": "Unused import"}]}',
            "docs/guide.md": '{"reviews": [{"lineNumber": 3, "reviewComment": "Capitalize"}]}',
        })
        orchestrator = ReviewOrchestrator(github, llm, response_parser=FailingResponseParser({"src/app.py"}))

        result = orchestrator.run("octo-org/octo-repo", 42)

        assert result.files_failed == 1
        assert result.files_reviewed == 1
        assert result.submitted
        assert [(c.path, c.line, c.body) for c in github.reviews[0][3]] == [("docs/guide.md", 3, "Capitalize")]

    def test_unusual_line_number_does_not_abort_run(self):
        github = FakeGitHub(MULTI_FILE_DIFF)
        llm = FakeCompletion({
            "src/app.py": '{"reviews": [{"lineNumber": "²", "reviewComment": "Odd digit"}]}',
            "docs/guide.md": '{"reviews": [{"lineNumber": 4, "reviewComment": "Trailing text"}]}',
        })

        result = ReviewOrchestrator(github, llm).run("octo-org/octo-repo", 42)

        assert result.files_reviewed == 2
        assert [(c.path, c.line) for c in github.reviews[0][3]] == [("docs/guide.md", 4)]
