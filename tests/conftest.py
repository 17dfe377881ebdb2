"""Shared diff fixtures for the test suite."""

import pytest

from pr_review_agent.models.pr_diff import PullRequestContext
from pr_review_agent.models.review import CompletionResult


MULTI_FILE_DIFF = "\n".join([
    "diff --git a/src/app.py b/src/app.py",
    "index 83db48f..bf269f4 100644",
    "--- a/src/app.py",
    "+++ b/src/app.py",
    "@@ -1,5 +1,6 @@",
    " import os",
    "+import sys",
    " ",
    " def main():",
    "-    pass",
    "+    print(\"hello\")",
    "     return 0",
    "@@ -20,3 +21,4 @@ def helper():",
    "     x = 1",
    "     y = 2",
    "+    z = 3",
    "     return x + y",
    "diff --git a/old.txt b/old.txt",
    "deleted file mode 100644",
    "index e69de29..0000000",
    "--- a/old.txt",
    "+++ /dev/null",
    "@@ -1,2 +0,0 @@",
    "-line one",
    "-line two",
    "diff --git a/docs/readme.md b/docs/guide.md",
    "similarity index 90%",
    "rename from docs/readme.md",
    "rename to docs/guide.md",
    "index 1111111..2222222 100644",
    "--- a/docs/readme.md",
    "+++ b/docs/guide.md",
    "@@ -3,2 +3,2 @@",
    "-Old title",
    "+New title",
    " End",
    "diff --git a/assets/logo.png b/assets/logo.png",
    "new file mode 100644",
    "index 0000000..3333333",
    "Binary files /dev/null and b/assets/logo.png differ",
]) + "\n"


SINGLE_FILE_DIFF = "\n".join([
    "diff --git a/src/calc.py b/src/calc.py",
    "--- a/src/calc.py",
    "+++ b/src/calc.py",
    "@@ -9,0 +10,3 @@",
    "+def add(a, b):",
    "+    return a + b",
    "+",
]) + "\n"


def completion(content):
    """Build a CompletionResult with one choice."""
    return CompletionResult.model_validate({
        'choices': [{'index': 0, 'message': {'role': 'assistant', 'content': content}, 'finish_reason': 'stop'}]
    })


@pytest.fixture
def pr_context():
    return PullRequestContext(
        owner="octo-org",
        repo_name="octo-repo",
        pull_number=42,
        title="Add calculator",
        description="Adds an add() helper.",
    )
