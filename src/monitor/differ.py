"""
Line differs for comparing two versions of extracted content.

Every differ returns a list of DiffRecord values that interleaves both
inputs: the Removed and Unchanged lines rebuild the old text, the Added
and Unchanged lines rebuild the new text.
"""

import difflib
from abc import ABC, abstractmethod

from .models import DiffRecord


class LineDiffer(ABC):
    """Interface for line diff strategies."""

    @abstractmethod
    def diff(self, old: list[str], new: list[str]) -> list[DiffRecord]:
        """
        Align two line sequences.

        Args:
            old: Lines of the previous text
            new: Lines of the current text

        Returns:
            Ordered list of DiffRecord values
        """
        pass


class LCSDiffer(LineDiffer):
    """
    Longest-common-subsequence line differ.

    Produces a minimal edit script. When a line could be either removed or
    added first without shortening the common subsequence, the removal is
    emitted first, so a replaced line reads as `-old` followed by `+new`.

    Memory and time are O(n*m) in the lines left after the common prefix
    and suffix are stripped, so a page rewritten top to bottom pays for the
    full table.
    """

    def diff(self, old: list[str], new: list[str]) -> list[DiffRecord]:
        # Common prefix and suffix never need the table
        prefix = 0
        while prefix < len(old) and prefix < len(new) and old[prefix] == new[prefix]:
            prefix += 1

        suffix = 0
        while (
            suffix < len(old) - prefix
            and suffix < len(new) - prefix
            and old[-1 - suffix] == new[-1 - suffix]
        ):
            suffix += 1

        old_mid = old[prefix : len(old) - suffix]
        new_mid = new[prefix : len(new) - suffix]

        records = [DiffRecord.unchanged(line) for line in old[:prefix]]
        records.extend(self._diff_middle(old_mid, new_mid))
        records.extend(DiffRecord.unchanged(line) for line in old[len(old) - suffix :])
        return records

    def _diff_middle(self, old: list[str], new: list[str]) -> list[DiffRecord]:
        n, m = len(old), len(new)
        if n == 0:
            return [DiffRecord.added(line) for line in new]
        if m == 0:
            return [DiffRecord.removed(line) for line in old]

        # lengths[i][j] = LCS length of old[i:] and new[j:]
        lengths = [[0] * (m + 1) for _ in range(n + 1)]
        for i in range(n - 1, -1, -1):
            row, below = lengths[i], lengths[i + 1]
            for j in range(m - 1, -1, -1):
                if old[i] == new[j]:
                    row[j] = below[j + 1] + 1
                else:
                    row[j] = max(below[j], row[j + 1])

        records: list[DiffRecord] = []
        i = j = 0
        while i < n and j < m:
            if old[i] == new[j]:
                records.append(DiffRecord.unchanged(old[i]))
                i += 1
                j += 1
            elif lengths[i + 1][j] >= lengths[i][j + 1]:
                records.append(DiffRecord.removed(old[i]))
                i += 1
            else:
                records.append(DiffRecord.added(new[j]))
                j += 1

        records.extend(DiffRecord.removed(line) for line in old[i:])
        records.extend(DiffRecord.added(line) for line in new[j:])
        return records


class SequenceMatcherDiffer(LineDiffer):
    """
    Differ backed by difflib.SequenceMatcher.

    Faster on large pages but not guaranteed to be minimal.
    """

    def diff(self, old: list[str], new: list[str]) -> list[DiffRecord]:
        matcher = difflib.SequenceMatcher(a=old, b=new, autojunk=False)
        records: list[DiffRecord] = []

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                records.extend(DiffRecord.unchanged(line) for line in old[i1:i2])
                continue
            # "replace" is a delete followed by an insert
            if tag in ("delete", "replace"):
                records.extend(DiffRecord.removed(line) for line in old[i1:i2])
            if tag in ("insert", "replace"):
                records.extend(DiffRecord.added(line) for line in new[j1:j2])

        return records


DIFFERS: dict[str, type[LineDiffer]] = {
    "lcs": LCSDiffer,
    "sequence-matcher": SequenceMatcherDiffer,
}


def get_differ(name: str = "lcs") -> LineDiffer:
    """
    Build a differ by name.

    Raises:
        ValueError: If no differ is registered under the name
    """
    try:
        return DIFFERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown diff algorithm: {name}. Use one of: {', '.join(DIFFERS)}"
        ) from None
