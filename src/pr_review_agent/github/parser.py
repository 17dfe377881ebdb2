"""
Unified Diff Parser

Parses the raw unified diff of a pull request into DiffFile records
with addressable hunks and right-side line numbers.
"""

import re
import logging
from typing import List, Optional

from ..exceptions import MalformedDiffError
from ..models.pr_diff import DEV_NULL, DiffFile, DiffLine, Hunk


logger = logging.getLogger(__name__)


class DiffParser:
    """
    Parser for unified diff text.

    Splits a diff into file sections, each file into hunks, and tags
    every hunk line with its line number in the post-change file.
    Removal lines and "\\ No newline at end of file" markers carry no
    right-side number.
    """

    def __init__(self):
        """Initialize diff parser."""
        self.git_header_pattern = re.compile(r'^diff --git "?a/(.+?)"? "?b/(.+?)"?$')
        self.hunk_header_pattern = re.compile(r'^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@ ?(.*)$')

    def parse(self, diff_text: Optional[str]) -> List[DiffFile]:
        """
        Parse unified diff text into DiffFile records.

        Args:
            diff_text: Raw unified diff (git or plain format)

        Returns:
            DiffFile records in diff order. Deleted files are included
            with path set to DEV_NULL.

        Raises:
            MalformedDiffError: If non-empty text contains no file sections,
                or a hunk header appears before any file header
        """
        if diff_text is None or not diff_text.strip():
            return []

        files: List[DiffFile] = []
        current: Optional[DiffFile] = None
        hunk: Optional[Hunk] = None
        saw_old_header = False
        saw_new_header = False
        old_remaining = 0
        new_remaining = 0
        next_right = 0

        for line in self._split_lines(diff_text):
            # Hunk body, bounded by the counts declared in the hunk header
            if hunk is not None and (old_remaining > 0 or new_remaining > 0):
                marker = line[:1]
                if marker == '+':
                    hunk.lines.append(DiffLine(next_right, line))
                    next_right += 1
                    new_remaining -= 1
                    continue
                if marker == '-':
                    hunk.lines.append(DiffLine(None, line))
                    old_remaining -= 1
                    continue
                if marker == ' ' or line == '':
                    hunk.lines.append(DiffLine(next_right, line))
                    next_right += 1
                    old_remaining -= 1
                    new_remaining -= 1
                    continue
                if marker == '\\':
                    hunk.lines.append(DiffLine(None, line))
                    continue

                logger.debug(f"Hunk in {current.path or current.source_path} ended early: {line[:40]!r}")
                hunk = None

            if line.startswith('\\') and hunk is not None:
                hunk.lines.append(DiffLine(None, line))
                continue

            if line.startswith('diff --git '):
                current = self._start_file(files)
                hunk = None
                saw_old_header = saw_new_header = False

                header_match = self.git_header_pattern.match(line)
                if header_match:
                    current.source_path = header_match.group(1)
                    current.path = header_match.group(2)
                continue

            if line.startswith('--- ') and (current is None or current.hunks or saw_old_header):
                current = self._start_file(files)
                hunk = None
                saw_new_header = False

            if line.startswith('--- '):
                saw_old_header = True
                old_path = self._clean_path(line[4:], 'a/')
                if old_path == DEV_NULL:
                    current.is_new = True
                else:
                    current.source_path = old_path
                continue

            if line.startswith('+++ '):
                if current is None:
                    current = self._start_file(files)
                saw_new_header = True
                current.path = self._clean_path(line[4:], 'b/')
                if current.path == DEV_NULL:
                    current.is_deleted = True
                continue

            if line.startswith('@@'):
                if current is None:
                    raise MalformedDiffError("Hunk header found before any file header")

                header_match = self.hunk_header_pattern.match(line)
                if not header_match:
                    logger.warning(f"Skipping invalid hunk header in {current.path}: {line!r}")
                    hunk = None
                    continue

                hunk = Hunk(
                    old_start=int(header_match.group(1)),
                    old_count=int(header_match.group(2) or 1),
                    new_start=int(header_match.group(3)),
                    new_count=int(header_match.group(4) or 1),
                    section=header_match.group(5).strip(),
                )
                current.hunks.append(hunk)

                # Every hunk restarts numbering from its own header
                next_right = hunk.new_start
                old_remaining = hunk.old_count
                new_remaining = hunk.new_count
                continue

            if current is not None and not current.hunks:
                self._apply_extended_header(current, line, saw_new_header)

        if not files:
            raise MalformedDiffError("No file headers found in diff text")

        for diff_file in files:
            self._finalize(diff_file)

        logger.info(
            f"Parsed diff: {len(files)} files, "
            f"{sum(len(f.hunks) for f in files)} hunks, "
            f"+{sum(f.additions for f in files)}/-{sum(f.deletions for f in files)}"
        )
        return files

    def _split_lines(self, diff_text: str) -> List[str]:
        """Split on newlines only; str.splitlines() would also break on form feeds."""
        lines = diff_text.split('\n')
        if lines and lines[-1] == '':
            lines.pop()
        return [line[:-1] if line.endswith('\r') else line for line in lines]

    def _start_file(self, files: List[DiffFile]) -> DiffFile:
        diff_file = DiffFile(path='')
        files.append(diff_file)
        return diff_file

    def _apply_extended_header(self, diff_file: DiffFile, line: str, saw_new_header: bool) -> None:
        """Apply git extended header lines (mode, rename, binary) to a file."""
        if line.startswith('new file mode'):
            diff_file.is_new = True
        elif line.startswith('deleted file mode'):
            diff_file.is_deleted = True
        elif line.startswith('rename from '):
            diff_file.is_renamed = True
            diff_file.source_path = line[len('rename from '):]
        elif line.startswith('rename to ') and not saw_new_header:
            diff_file.is_renamed = True
            diff_file.path = line[len('rename to '):]
        elif line.startswith('copy to ') and not saw_new_header:
            diff_file.path = line[len('copy to '):]
        elif line.startswith('Binary files ') or line.startswith('GIT binary patch'):
            diff_file.is_binary = True

    def _finalize(self, diff_file: DiffFile) -> None:
        """Normalize deleted files so their post-change path is the sentinel."""
        if diff_file.is_deleted or diff_file.path == DEV_NULL:
            diff_file.is_deleted = True
            if diff_file.path != DEV_NULL:
                diff_file.source_path = diff_file.source_path or diff_file.path
                diff_file.path = DEV_NULL

    def _clean_path(self, raw_path: str, prefix: str) -> str:
        """
        Strip timestamp suffix, quotes and the a/ or b/ prefix from a header path.

        Args:
            raw_path: Path part of a ---/+++ header line
            prefix: Side prefix to remove ('a/' or 'b/')

        Returns:
            Repository-relative path, or DEV_NULL
        """
        path = raw_path.split('\t', 1)[0].rstrip()
        if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
            path = path[1:-1].replace('\\"', '"')

        if path == DEV_NULL:
            return path

        if path.startswith(prefix):
            path = path[len(prefix):]
        return path
