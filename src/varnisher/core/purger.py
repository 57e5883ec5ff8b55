"""
PagePurger: purge a page and every same-origin resource it embeds.

A run goes through five stages, each finishing before the next starts:

1. purge the target page itself, so a fresh GET sees current references;
2. fetch the page (a failure here ends the run, there is nothing to scan);
3. extract stylesheet/script/image references into the purge queue;
4. tidy the queue: absolutize each reference and keep only plain-HTTP URLs
   on the target's host;
5. purge the queue concurrently on a bounded thread pool and wait for all.

Nothing is retried. A failed purge is recorded in the report and the run
carries on; only a failed fetch stops it early.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional

from varnisher.core.config import PurgerConfig
from varnisher.core.models import (
    FailureReason,
    FetchResult,
    PurgeOutcome,
    PurgeReport,
    Target,
)
from varnisher.core.scraping.fetcher import Fetcher
from varnisher.core.scraping.normalizer import resolve_resource
from varnisher.core.scraping.parser import iter_resources, parse_document
from varnisher.services.purge_client import PurgeClient

_module_logger = logging.getLogger(__name__)


class PagePurger:
    """Orchestrates one purge run per call to `run`.

    `purge_client` and `fetcher` default to the real network implementations
    built from `config`; tests inject fakes exposing `purge(url)` and
    `fetch_page(url)`.
    """

    def __init__(
        self,
        config: Optional[PurgerConfig] = None,
        purge_client=None,
        fetcher=None,
        logger=None,
    ):
        self.config = config or PurgerConfig()
        self.purge_client = purge_client or PurgeClient.from_config(self.config)
        self.fetcher = fetcher or Fetcher.from_config(self.config)
        self.logger = logger or _module_logger
        self.queue: List[str] = []

    def _progress(self, msg: str, *args) -> None:
        # per-URL chatter only surfaces at INFO in verbose mode
        level = logging.INFO if self.config.verbose else logging.DEBUG
        self.logger.log(level, msg, *args)

    def _report_outcome(self, outcome: PurgeOutcome) -> None:
        if outcome.success:
            self._progress("Purged  %s", outcome.url)
        else:
            reason = outcome.reason.value if outcome.reason else "unknown"
            self._progress("Failed to purge %s: %s", outcome.url, reason)

    def purge_target(self, url: str) -> PurgeOutcome:
        self.logger.info("Purging %s...", url)
        outcome = self.purge_client.purge(url)
        self._report_outcome(outcome)
        return outcome

    def fetch(self, url: str) -> FetchResult:
        self.logger.info("Looking for external resources on %s...", url)
        result = self.fetcher.fetch_page(url)
        if not result.ok:
            self.logger.warning(
                "Couldn't fetch %s (%s): %s",
                url,
                result.failure.value if result.failure else "unknown",
                result.detail,
            )
        return result

    def extract(self, body: Optional[str]) -> int:
        for rule, resource in iter_resources(parse_document(body)):
            self._progress("Found %s %s", rule.name, resource)
            self.queue.append(resource)
        self.logger.info("%d total resources found.", len(self.queue))
        return len(self.queue)

    def tidy(self, target: Target) -> int:
        self.logger.info("Tidying resources...")
        kept: List[str] = []
        for candidate in self.queue:
            resolution = resolve_resource(candidate, target)
            if resolution.accepted:
                kept.append(resolution.url)
            else:
                self.logger.debug(
                    "Skipping %s (%s)", candidate, resolution.rejection.value
                )
        self.queue[:] = kept
        self.logger.info("%d purgeable resources found.", len(self.queue))
        return len(self.queue)

    def _purge_one(self, url: str) -> PurgeOutcome:
        self._progress("Purging %s...", url)
        return self.purge_client.purge(url)

    def dispatch(self) -> List[PurgeOutcome]:
        """Purge every queued URL concurrently and wait for all of them."""
        self.logger.info("Purging resources...")
        outcomes: List[PurgeOutcome] = []
        if not self.queue:
            return outcomes

        workers = min(self.config.max_workers, len(self.queue))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self._purge_one, u): u for u in self.queue}
            for fut in as_completed(futures):
                url = futures[fut]
                try:
                    outcome = fut.result()
                except Exception as exc:
                    # a broken client must not take the rest of the batch down
                    outcome = PurgeOutcome.failed(
                        url, FailureReason.CONNECTION_ERROR, str(exc)
                    )
                self._report_outcome(outcome)
                outcomes.append(outcome)
        return outcomes

    def run(self, url: str) -> PurgeReport:
        """Run the five stages for `url` and return the aggregated report."""
        self.queue = []
        target_outcome = self.purge_target(url)

        try:
            target = Target.from_url(url)
        except ValueError as exc:
            failure = FetchResult(
                url=url, failure=FailureReason.UNPARSABLE_URL, detail=str(exc)
            )
            self.logger.warning("Couldn't parse URL for resource-searching: %s", url)
            return PurgeReport(
                target=url, target_outcome=target_outcome, fetch_failure=failure
            )

        page = self.fetch(url)
        if not page.ok:
            return PurgeReport(
                target=url, target_outcome=target_outcome, fetch_failure=page
            )

        discovered = self.extract(page.body)
        if discovered == 0:
            self.logger.info("No resources found. Abort!")
            return PurgeReport(target=url, target_outcome=target_outcome)

        purgeable = self.tidy(target)
        outcomes = self.dispatch()
        self.logger.info("Nothing more to do!")

        return PurgeReport(
            target=url,
            target_outcome=target_outcome,
            discovered=discovered,
            purgeable=purgeable,
            outcomes=outcomes,
        )
