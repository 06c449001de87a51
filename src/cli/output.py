"""
Terminal output formatter for CLI.

Handles all display logic - no business logic, just presentation.
"""

from monitor.models import ResourceOutcome, ResourceState, RunResult


def format_outcome(outcome: ResourceOutcome, dry_run: bool = False) -> str:
    """
    Describe the outcome of one URL check in a single line.

    Args:
        outcome: Outcome to describe
        dry_run: Whether reports were printed instead of sent

    Returns:
        One-line description
    """
    url = outcome.url

    if outcome.state is ResourceState.NEW:
        return f"This URL will now be monitored: {url}"
    if outcome.state is ResourceState.UNCHANGED_RAW:
        return f"This URL didn't change: {url}"
    if outcome.state is ResourceState.UNCHANGED_CONTENT:
        return f"The website changed, but the content stayed the same: {url}"
    if outcome.state is ResourceState.CHANGED:
        if dry_run:
            return f"Changes detected (dry run, report printed above): {url}"
        return f"Changes detected and sent to {len(outcome.message_ids)} recipient(s): {url}"
    return f"Failed to check {url}: {outcome.error}"


def print_outcome(outcome: ResourceOutcome, dry_run: bool = False) -> None:
    """Print the one-line description of an outcome."""
    print(format_outcome(outcome, dry_run=dry_run))


def print_run_summary(result: RunResult) -> None:
    """
    Print a short summary of a run.

    Args:
        result: RunResult containing all outcomes
    """
    failed = result.get_failed()

    print("\n" + "=" * 60)
    print(f"URLs Checked:      {result.urls_processed}")
    print(f"Now Monitored:     {result.count(ResourceState.NEW)}")
    print(f"Unchanged:         {result.count(ResourceState.UNCHANGED_RAW)}")
    print(f"Content Unchanged: {result.count(ResourceState.UNCHANGED_CONTENT)}")
    print(f"Changed:           {len(result.get_changed())}")
    print(f"Failed:            {len(failed)}")

    if result.finished_at:
        duration = (result.finished_at - result.started_at).total_seconds()
        print(f"Duration:          {duration:.1f} seconds")

    if failed:
        print("\nFailed URLs:")
        for outcome in failed:
            print(f"  - {outcome.url}: {outcome.error}")

    if result.aborted:
        print("\nRun aborted after the first failure (fail-fast).")
    print("=" * 60)
