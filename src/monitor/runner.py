"""
Runner that drives the change-detection pipeline for a list of URLs.

For every URL: fetch, compare with the stored snapshot, compare the
extracted content, diff, render, notify, and update the snapshot.
"""

import asyncio
import sys
from datetime import datetime
from typing import TextIO

import structlog

from .config import ConfigurationError, MonitorConfig
from .differ import LineDiffer, get_differ
from .extractor import ContentExtractor
from .fetcher import Fetcher, FetchError, HTTPFetcher
from .models import ResourceOutcome, ResourceState, RunResult
from .notifier import Notifier, NotifierError
from .report import ReportRenderer
from .storage import FileSnapshotStore, SnapshotStore, SnapshotStoreError

logger = structlog.get_logger(__name__)


def split_lines(text: str) -> list[str]:
    """Split extracted text into diff input; empty text has no lines."""
    return text.split("\n") if text else []


class MonitorRunner:
    """
    Orchestrates snapshot comparison and reporting for a list of URLs.

    In fail-fast mode URLs are checked strictly in order and the first
    failure ends the run. Otherwise URLs are checked concurrently and a
    failing URL only affects its own outcome.
    """

    def __init__(
        self,
        config: MonitorConfig,
        notifier: Notifier | None = None,
        fetcher: Fetcher | None = None,
        store: SnapshotStore | None = None,
        extractor: ContentExtractor | None = None,
        differ: LineDiffer | None = None,
        renderer: ReportRenderer | None = None,
        output: TextIO | None = None,
    ):
        """
        Initialize the runner.

        Args:
            config: Run configuration
            notifier: Report delivery channel; required unless running dry
            fetcher: Fetcher to use (default: HTTPFetcher)
            store: Snapshot store (default: files under config.cache_dir)
            extractor: Content extractor (default: region by config.content_id)
            differ: Line differ (default: config.diff_algorithm)
            renderer: Report renderer
            output: Stream for dry-run reports (default: stdout)
        """
        if notifier is None and not config.dry_run:
            raise ConfigurationError("A notifier is required unless running in dry mode")

        self.config = config
        self.notifier = notifier
        self.fetcher = fetcher or HTTPFetcher(user_agent=config.user_agent)
        self.store = store or FileSnapshotStore(config.cache_dir)
        self.extractor = extractor or ContentExtractor(content_id=config.content_id)
        self.differ = differ or get_differ(config.diff_algorithm)
        self.renderer = renderer or ReportRenderer()
        self.output = output
        self.logger = logger.bind(component="runner", dry_run=config.dry_run)

        self._locks: dict[str, asyncio.Lock] = {}

    async def run_async(self, urls: list[str]) -> RunResult:
        """
        Check every URL once.

        Args:
            urls: URLs in the order they should be reported

        Returns:
            RunResult with one outcome per checked URL, in input order
        """
        started_at = datetime.now()
        aborted = False

        if self.config.fail_fast:
            outcomes: list[ResourceOutcome] = []
            for url in urls:
                outcome = await self._check_guarded(url)
                outcomes.append(outcome)
                if not outcome.success:
                    aborted = True
                    self.logger.error(
                        "Aborting run", url=url, remaining=len(urls) - len(outcomes)
                    )
                    break
        else:
            semaphore = asyncio.Semaphore(self.config.max_concurrency)

            async def bounded(url: str) -> ResourceOutcome:
                async with semaphore:
                    return await self._check_guarded(url)

            outcomes = list(await asyncio.gather(*(bounded(url) for url in urls)))

        return RunResult(
            started_at=started_at,
            finished_at=datetime.now(),
            outcomes=outcomes,
            aborted=aborted,
        )

    def run(self, urls: list[str]) -> RunResult:
        """
        Run synchronously.

        Convenience method that wraps run_async.
        """
        return asyncio.run(self.run_async(urls))

    async def _check_guarded(self, url: str) -> ResourceOutcome:
        """Check one URL, turning any failure into a FAILED outcome."""
        try:
            return await self.check_resource(url)
        except (FetchError, SnapshotStoreError, NotifierError) as e:
            self.logger.error("Check failed", url=url, error=str(e))
            return ResourceOutcome(url=url, state=ResourceState.FAILED, error=str(e))
        except Exception as e:
            self.logger.exception("Unexpected error", url=url)
            return ResourceOutcome(
                url=url, state=ResourceState.FAILED, error=f"Unexpected error: {str(e)}"
            )

    async def check_resource(self, url: str) -> ResourceOutcome:
        """
        Run the full pipeline for a single URL.

        Raises:
            FetchError: If the URL could not be fetched
            SnapshotStoreError: If the snapshot could not be read or written
            NotifierError: If the report could not be delivered
        """
        digest = self.store.key(url)
        log = self.logger.bind(url=url, digest=digest)

        async with self._lock_for(digest):
            result, error = await self.fetcher.fetch(url, timeout=self.config.fetch_timeout)
            if error or result is None:
                raise FetchError(error or "No response received")
            body = result.content

            cached = self.store.load(digest)

            if cached is None:
                log.info("Started monitoring")
                self._save(digest, body)
                return ResourceOutcome(url=url, state=ResourceState.NEW)

            if cached == body:
                log.info("Raw page unchanged")
                return ResourceOutcome(url=url, state=ResourceState.UNCHANGED_RAW)

            # Parsing and diffing are CPU bound; keep them off the event loop
            old_text, new_text = await asyncio.to_thread(self._extract_pair, cached, body)

            if old_text == new_text:
                log.info("Page changed outside the content region")
                self._save(digest, body)
                return ResourceOutcome(url=url, state=ResourceState.UNCHANGED_CONTENT)

            diff = await asyncio.to_thread(
                self.differ.diff, split_lines(old_text), split_lines(new_text)
            )
            report = self.renderer.render(diff, url)
            log.info("Content changed", records=len(diff))

            outcome = ResourceOutcome(url=url, state=ResourceState.CHANGED, report=report)

            if self.config.dry_run:
                out = self.output or sys.stdout
                out.write(report.text + "\n")
                out.flush()
            else:
                outcome.message_ids = await self.notifier.send(
                    self.config.subject, report.text, report.html
                )
                outcome.notified = True

            self._save(digest, body)
            return outcome

    def _extract_pair(self, old: bytes, new: bytes) -> tuple[str, str]:
        return self.extractor.extract(old), self.extractor.extract(new)

    def _save(self, digest: str, body: bytes) -> None:
        if self.config.dry_run:
            return
        self.store.save(digest, body)

    def _lock_for(self, digest: str) -> asyncio.Lock:
        # Serializes duplicate URLs in one run
        if digest not in self._locks:
            self._locks[digest] = asyncio.Lock()
        return self._locks[digest]
