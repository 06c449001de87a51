"""
Configuration for a monitoring run.

Settings are collected once at startup and passed explicitly into the
runner and notifier; nothing reads global state afterwards.
"""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_SUBJECT = "[Monitor]: Website has changed"


class ConfigurationError(Exception):
    """Raised for missing credentials or unreadable input lists."""

    pass


@dataclass
class MailgunSettings:
    """Credentials and delivery options for the Mailgun notifier."""

    domain: str | None
    private_key: str | None
    public_key: str | None
    sender: str | None = None
    base_url: str = "https://api.mailgun.net/v3"
    retry_attempts: int = 3
    retry_delay: float = 1.0
    timeout: float = 30.0  # seconds

    def __post_init__(self):
        # Sender defaults to the postmaster of the sending domain
        if not self.sender and self.domain:
            self.sender = f"Page Monitor <postmaster@{self.domain}>"

    def validate(self) -> None:
        """
        Check that every required credential is present.

        Raises:
            ConfigurationError: Naming all missing credentials
        """
        missing = [
            name
            for name, value in (
                ("domain", self.domain),
                ("private-key", self.private_key),
                ("public-key", self.public_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required Mailgun credentials: {', '.join(missing)}"
            )
        if self.retry_attempts < 0:
            raise ConfigurationError("retry_attempts must not be negative")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")


@dataclass
class MonitorConfig:
    """
    Settings for the monitoring pipeline.

    Paths left unset resolve against `base_dir`.
    """

    base_dir: Path = field(default_factory=Path.cwd)
    cache_dir: Path | None = None
    urls_file: Path | None = None
    recipients_file: Path | None = None
    dry_run: bool = False
    fail_fast: bool = False
    max_concurrency: int = 3
    fetch_timeout: int = 30000  # milliseconds
    user_agent: str | None = None
    content_id: str = "content"
    diff_algorithm: str = "lcs"
    subject: str = DEFAULT_SUBJECT

    def __post_init__(self):
        self.base_dir = Path(self.base_dir)
        if self.cache_dir is None:
            self.cache_dir = self.base_dir / "cache"
        if self.urls_file is None:
            self.urls_file = self.base_dir / "urls.txt"
        if self.recipients_file is None:
            self.recipients_file = self.base_dir / "emails.txt"

        if self.max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be at least 1")
        if self.fetch_timeout <= 0:
            raise ConfigurationError("fetch_timeout must be positive")


def read_lines(path: str | Path) -> list[str]:
    """
    Read a newline-delimited list, skipping blank lines.

    Args:
        path: File to read

    Returns:
        Stripped, non-empty lines in file order

    Raises:
        ConfigurationError: If the file cannot be read
    """
    file_path = Path(path)
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return [line.strip() for line in f if line.strip()]
    except FileNotFoundError:
        raise ConfigurationError(f"File not found: {file_path}") from None
    except OSError as e:
        raise ConfigurationError(f"Error reading file {file_path}: {e}") from e
