"""
Core data models for the page monitor.

All models are plain data structures shared by the engine and the CLI.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class DiffTag(str, Enum):
    """Classification of a line relative to the old and new text."""

    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class DiffRecord:
    """
    One classified line of a computed alignment.

    Frozen so diff sequences can be shared between renderers safely.
    """

    tag: DiffTag
    line: str

    @classmethod
    def unchanged(cls, line: str) -> "DiffRecord":
        return cls(DiffTag.UNCHANGED, line)

    @classmethod
    def added(cls, line: str) -> "DiffRecord":
        return cls(DiffTag.ADDED, line)

    @classmethod
    def removed(cls, line: str) -> "DiffRecord":
        return cls(DiffTag.REMOVED, line)


def old_lines(records: list[DiffRecord]) -> list[str]:
    """Lines of the old text, rebuilt from Removed and Unchanged records."""
    return [r.line for r in records if r.tag is not DiffTag.ADDED]


def new_lines(records: list[DiffRecord]) -> list[str]:
    """Lines of the new text, rebuilt from Added and Unchanged records."""
    return [r.line for r in records if r.tag is not DiffTag.REMOVED]


class ResourceState(str, Enum):
    """Terminal state of a single resource check."""

    NEW = "new"
    UNCHANGED_RAW = "unchanged_raw"
    UNCHANGED_CONTENT = "unchanged_content"
    CHANGED = "changed"
    FAILED = "failed"


@dataclass
class FetchResult:
    """Raw response for a single URL."""

    url: str  # URL as requested
    status_code: int
    content: bytes
    fetch_time_ms: int

    @property
    def success(self) -> bool:
        """Check if the fetch returned a 2xx status."""
        return 200 <= self.status_code < 300


@dataclass
class Report:
    """A rendered change report in both output forms."""

    url: str
    text: str
    html: str


@dataclass
class ResourceOutcome:
    """
    Result of checking one resource.

    `report` is only set for CHANGED resources; `message_ids` holds the
    notifier's identifiers when the report was sent.
    """

    url: str
    state: ResourceState
    report: Report | None = None
    notified: bool = False
    message_ids: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.state is not ResourceState.FAILED


@dataclass
class RunResult:
    """
    Results for one pass over the resource list.

    `aborted` is set when fail-fast mode stopped the run early; the
    outcomes collected up to that point are kept.
    """

    started_at: datetime
    finished_at: datetime | None
    outcomes: list[ResourceOutcome]
    aborted: bool = False

    @property
    def urls_processed(self) -> int:
        return len(self.outcomes)

    @property
    def urls_failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    def count(self, state: ResourceState) -> int:
        """Number of outcomes in the given state."""
        return sum(1 for outcome in self.outcomes if outcome.state is state)

    def get_changed(self) -> list[ResourceOutcome]:
        """Get all outcomes with a detected content change."""
        return [o for o in self.outcomes if o.state is ResourceState.CHANGED]

    def get_failed(self) -> list[ResourceOutcome]:
        """Get all outcomes that failed."""
        return [o for o in self.outcomes if not o.success]
