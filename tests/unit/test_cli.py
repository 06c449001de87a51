"""
Unit tests for the command-line wrapper.
"""

import logging

import pytest
import structlog

import monitor.runner
from cli.main import EXIT_CONFIG_ERROR, main, parse_arguments
from cli.output import format_outcome
from monitor.models import FetchResult, ResourceOutcome, ResourceState
from monitor.storage import FileSnapshotStore

CREDENTIALS = ["--domain", "mg.example.com", "--private-key", "k", "--public-key", "p"]


class StubFetcher:
    pages: dict[str, bytes] = {}

    def __init__(self, user_agent=None):
        self.user_agent = user_agent

    async def fetch(self, url, timeout=30000):
        if url not in self.pages:
            return None, f"HTTP error: cannot reach {url}"
        return FetchResult(url=url, status_code=200, content=self.pages[url], fetch_time_ms=1), None


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    for name in ("MAILGUN_DOMAIN", "MAILGUN_PRIVATE_KEY", "MAILGUN_PUBLIC_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(monitor.runner, "HTTPFetcher", StubFetcher)
    (tmp_path / "urls.txt").write_text("https://a.example\n\nhttps://b.example\n")
    (tmp_path / "emails.txt").write_text("someone@example.com\n")
    yield tmp_path
    # main() configures logging against the captured stderr
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


class TestFormatOutcome:
    """Tests for the per-URL output line."""

    def test_lines_per_state(self):
        """Test the message for each state."""
        url = "https://example.com"

        assert format_outcome(ResourceOutcome(url, ResourceState.NEW)) == (
            "This URL will now be monitored: https://example.com"
        )
        assert format_outcome(ResourceOutcome(url, ResourceState.UNCHANGED_RAW)) == (
            "This URL didn't change: https://example.com"
        )
        assert "content stayed the same" in format_outcome(
            ResourceOutcome(url, ResourceState.UNCHANGED_CONTENT)
        )
        assert format_outcome(
            ResourceOutcome(url, ResourceState.CHANGED, message_ids=["a", "b"])
        ) == "Changes detected and sent to 2 recipient(s): https://example.com"
        assert "dry run" in format_outcome(
            ResourceOutcome(url, ResourceState.CHANGED), dry_run=True
        )
        assert format_outcome(
            ResourceOutcome(url, ResourceState.FAILED, error="boom")
        ) == "Failed to check https://example.com: boom"


class TestMain:
    """Tests for the CLI entry point."""

    def test_defaults(self):
        """Test default argument values."""
        args = parse_arguments(CREDENTIALS)

        assert args.dry is False
        assert args.fail_fast is False
        assert args.diff_algorithm == "lcs"
        assert args.concurrency == 3
        assert args.mail_timeout == 30.0

    def test_missing_credentials_exit(self, workspace, capsys):
        """Test that missing credentials stop the run before any fetch."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--dry", "--base-dir", str(workspace)])

        assert exc_info.value.code == EXIT_CONFIG_ERROR
        assert "Missing required Mailgun credentials" in capsys.readouterr().err

    def test_missing_url_list_exit(self, workspace, capsys):
        """Test that a missing URL list is a configuration error."""
        (workspace / "urls.txt").unlink()

        with pytest.raises(SystemExit) as exc_info:
            main(CREDENTIALS + ["--dry", "--base-dir", str(workspace)])

        assert exc_info.value.code == EXIT_CONFIG_ERROR
        assert "urls.txt" in capsys.readouterr().err

    def test_credentials_from_environment(self, workspace, monkeypatch):
        """Test that credentials can come from the environment."""
        monkeypatch.setenv("MAILGUN_DOMAIN", "mg.example.com")
        monkeypatch.setenv("MAILGUN_PRIVATE_KEY", "k")
        monkeypatch.setenv("MAILGUN_PUBLIC_KEY", "p")
        StubFetcher.pages = {"https://a.example": b"a", "https://b.example": b"b"}

        main(["--dry", "--base-dir", str(workspace)])

    def test_dry_run_prints_and_does_not_cache(self, workspace, capsys):
        """Test a dry pass over a seeded cache."""
        store = FileSnapshotStore(workspace / "cache")
        store.save(store.key("https://a.example"), b'<div id="content"><p>Old</p></div>')
        StubFetcher.pages = {
            "https://a.example": b'<div id="content"><p>New</p></div>',
            "https://b.example": b"<p>b</p>",
        }

        main(CREDENTIALS + ["--dry", "--base-dir", str(workspace)])

        out = capsys.readouterr().out
        assert "-Old\n+New\n" in out
        assert "Changes detected (dry run, report printed above): https://a.example" in out
        assert "This URL will now be monitored: https://b.example" in out
        assert store.load(store.key("https://b.example")) is None

    def test_failure_sets_exit_code(self, workspace, capsys):
        """Test that a failed URL makes the run exit with status 1."""
        StubFetcher.pages = {"https://a.example": b"a"}

        with pytest.raises(SystemExit) as exc_info:
            main(CREDENTIALS + ["--dry", "--base-dir", str(workspace)])

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Failed to check https://b.example" in out
        assert "This URL will now be monitored: https://a.example" in out

    def test_summary_lists_failed_urls(self, workspace, capsys):
        """Test that the run summary names each failed URL with its error."""
        StubFetcher.pages = {"https://a.example": b"a"}

        with pytest.raises(SystemExit):
            main(CREDENTIALS + ["--dry", "--base-dir", str(workspace)])

        summary = capsys.readouterr().out.split("=" * 60)[1]
        assert "Changed:           0" in summary
        assert "Failed:            1" in summary
        assert "Failed URLs:" in summary
        assert "  - https://b.example: HTTP error: cannot reach https://b.example" in summary
        assert "https://a.example:" not in summary
