from __future__ import annotations

"""Directory integrity check based on content-hash manifests."""

import asyncio
import logging
from typing import Optional, Tuple

from ..evaluation.threshold import Severity
from ..lists import load_directory_roots
from ..state.manifest_store import Manifest, ManifestStore, compute_manifest, diff_manifests
from .base import Check, CheckResult, CheckStatus

logger = logging.getLogger(__name__)

EMAIL_KEY = "directories_email_status"
_BODY_HEADER = "Below is a partial diff showing the file changes\n" + "=" * 49


class DirectoryIntegrityCheck(Check):
    """
    Alerts when files under the watched roots are added, removed or modified.

    The first run only records the baseline. The baseline advances only when a
    change alert is dispatched, so a throttled alert keeps accumulating drift
    until it can be reported.
    """

    name = "dirs"
    scan_key = "directories_status"

    @property
    def scan_interval(self) -> int:
        return self.settings.scan.directories

    async def scan(self) -> CheckResult:
        roots = load_directory_roots(self.settings.dir_list)
        if not roots:
            logger.debug("No watched directories configured in %s", self.settings.dir_list)
        current = await asyncio.to_thread(compute_manifest, roots)

        result, body = await asyncio.to_thread(self._reconcile, self.context.manifest_store, current)
        if body is not None:
            self.send_alert("Warning: files have changed", body, Severity.WARNING, alert_type=EMAIL_KEY)
        return result

    def _reconcile(self, store: ManifestStore, current: Manifest) -> Tuple[CheckResult, Optional[str]]:
        """Compare against the baseline under the store lock; return the alert body when one is due."""
        with store.locked():
            baseline = store.load()
            if baseline is None:
                store.save(current)
                logger.info("Recorded baseline manifest with %d files", len(current.entries))
                return CheckResult(name=self.name, status=CheckStatus.OK, findings=["baseline recorded"]), None

            diff = diff_manifests(baseline, current)
            if not diff.changed:
                return CheckResult(name=self.name, status=CheckStatus.OK), None

            findings = list(diff.lines)
            logger.warning("warning: %d manifest lines changed in watched directories", len(findings))
            if not self.context.throttle.should_run(EMAIL_KEY, self.settings.alerts.directories):
                logger.debug("Alert %s suppressed by throttle; keeping previous baseline", EMAIL_KEY)
                return CheckResult(name=self.name, status=CheckStatus.ALERTING, findings=findings), None

            store.save(current)
            body = f"{_BODY_HEADER}\n{diff.render()}"
            return CheckResult(name=self.name, status=CheckStatus.ALERTING, findings=findings, alerts_sent=1), body
