"""
Comment Resolver

Maps candidate comments onto GitHub review coordinates for one file
and drops the ones GitHub could not anchor.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..models.pr_diff import DiffFile
from ..models.review import PlatformComment, ReviewComment


logger = logging.getLogger(__name__)


class CommentResolver:
    """
    Resolves ReviewComment candidates into PlatformComments.

    The path always comes from the diff, never from the model. With
    line validation enabled, a candidate must point at a right-side line
    present in the file's hunks. Candidates for the same line are merged.
    """

    def __init__(self, validate_lines: bool = True, max_comments_per_file: Optional[int] = 10):
        """
        Initialize comment resolver.

        Args:
            validate_lines: Drop candidates whose line is not in the diff
            max_comments_per_file: Upper bound on comments kept per file
        """
        self.validate_lines = validate_lines
        self.max_comments_per_file = max_comments_per_file

    def resolve(self, diff_file: DiffFile, candidates: Sequence[ReviewComment]) -> List[PlatformComment]:
        """
        Resolve candidates for a single file.

        Args:
            diff_file: File the candidates were generated for
            candidates: Untrusted comments decoded from the model response

        Returns:
            PlatformComments in order of first appearance; never longer
            than candidates
        """
        addressable = diff_file.right_line_numbers()
        bodies: Dict[int, List[str]] = {}

        for candidate in candidates:
            line = candidate.line_number
            body = (candidate.body or "").strip()

            if line is None or line <= 0:
                logger.info(f"Dropping comment on {diff_file.path}: invalid line number {line!r}")
                continue
            if not body:
                logger.info(f"Dropping comment on {diff_file.path}:{line}: empty body")
                continue
            if self.validate_lines and line not in addressable:
                logger.info(f"Dropping comment on {diff_file.path}:{line}: line is not part of the diff")
                continue

            bodies.setdefault(line, []).append(body)

        resolved = [
            PlatformComment(path=diff_file.path, line=line, body="\n\n".join(parts))
            for line, parts in bodies.items()
        ]

        if self.max_comments_per_file is not None and len(resolved) > self.max_comments_per_file:
            logger.warning(f"Limiting comments for {diff_file.path} to {self.max_comments_per_file}")
            resolved = resolved[:self.max_comments_per_file]

        logger.debug(f"Resolved {len(resolved)}/{len(candidates)} comments for {diff_file.path}")
        return resolved
