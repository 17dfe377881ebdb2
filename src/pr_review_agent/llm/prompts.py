"""
Prompt Builder

Builds the per-file review prompt sent to the completion service.
The diff is rendered as numbered lines so the model can answer with
right-side line numbers that map directly onto GitHub review comments.
"""

import fnmatch
import logging
from typing import List, Optional, Sequence, Tuple

from ..models.pr_diff import DiffFile, PullRequestContext
from ..models.review import ReviewRequest


logger = logging.getLogger(__name__)

# Rendered in place of a line number for removed lines
NO_LINE_PLACEHOLDER = "~"

REVIEW_PROMPT_TEMPLATE = """Your task is to review pull requests. Instructions:
- Provide the response in following JSON format:  {{"reviews": [{{"lineNumber":  <line_number>, "reviewComment": "<review comment>"}}]}}
- Do not give positive comments or compliments.
- Provide comments and suggestions ONLY if there is something to improve, otherwise "reviews" should be an empty array.
- Write the comment in GitHub Markdown format.
- Provide comments only for the lines that have been changed. Changes are marked with a + or - sign at the beginning of the line.
- Do not provide comments for the files which only have documentation or formatting changes.
- Use the given description only for the overall context and only comment the code.
- Don't comment on the same line more than once. If multiple comments are needed, combine them into one comment.
- Don't provide comments for .json, .yml, or .xml type files.
- Don't comment for adding a newline at the end of the file
- IMPORTANT: NEVER suggest adding comments/documention to the code.

Review the following code diff in the file "{path}" and take the pull request title and description into account when writing the response.

Pull request title: {title}
Pull request description:

---
{description}
---

Git diff to review:

```diff
{changes}
```
"""


class PromptBuilder:
    """
    Builds bounded, deterministic review prompts.

    The instruction rules are fixed; only the file path, PR title,
    PR description and the numbered changes block vary per call.
    """

    def __init__(self, max_diff_lines: Optional[int] = 1500, exclude_patterns: Sequence[str] = ()):
        """
        Initialize prompt builder.

        Args:
            max_diff_lines: Maximum number of diff lines rendered per file
                (None for no limit)
            exclude_patterns: fnmatch globs of paths that are never reviewed
        """
        self.max_diff_lines = max_diff_lines
        self.exclude_patterns = list(exclude_patterns)

    def build(self, diff_file: DiffFile, context: PullRequestContext) -> ReviewRequest:
        """
        Build the review request for a single file.

        Args:
            diff_file: File to review (must have a real post-change path)
            context: Pull request metadata

        Returns:
            ReviewRequest with the complete prompt text
        """
        if diff_file.is_deleted:
            raise ValueError(f"Cannot build a prompt for deleted file {diff_file.display_path}")

        logger.debug(f"Building review prompt for {diff_file.path}")

        prompt = REVIEW_PROMPT_TEMPLATE.format(
            path=diff_file.path,
            title=context.title,
            description=context.description or "",
            changes=self.format_changes(diff_file),
        )
        return ReviewRequest(path=diff_file.path, prompt=prompt)

    def format_changes(self, diff_file: DiffFile) -> str:
        """
        Render every hunk line as "<right line number> <content>".

        Lines without a right-side number use NO_LINE_PLACEHOLDER.
        """
        rendered: List[str] = []
        for hunk in diff_file.hunks:
            for line in hunk.lines:
                number = NO_LINE_PLACEHOLDER if line.line_number_right is None else str(line.line_number_right)
                rendered.append(f"{number} {line.content}")

        if self.max_diff_lines is not None and len(rendered) > self.max_diff_lines:
            logger.warning(
                f"Diff for {diff_file.path} has {len(rendered)} lines, "
                f"truncating to {self.max_diff_lines}"
            )
            rendered = rendered[:self.max_diff_lines]

        return "\n".join(rendered)

    def should_review(self, diff_file: DiffFile) -> Tuple[bool, str]:
        """
        Decide whether a file is sent to the completion service.

        Returns:
            Tuple of (review, reason); reason explains a skip
        """
        if diff_file.is_deleted:
            return False, "file deleted"
        if not diff_file.path:
            return False, "no post-change path"
        if diff_file.is_binary:
            return False, "binary file"
        if not diff_file.lines:
            return False, "no changed lines"
        if self._is_excluded(diff_file.path):
            return False, "matches exclude pattern"
        return True, ""

    def _is_excluded(self, path: str) -> bool:
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.exclude_patterns)
