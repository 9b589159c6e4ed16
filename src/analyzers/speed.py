"""Page load speed analyzer backed by the Lighthouse CLI."""

import asyncio
import json
import logging
import tempfile
from pathlib import Path

from analyzers.base import BaseAnalyzer, ComponentResult, clamp_score
from config import settings
from recommendations.engine import RecommendationEngine

logger = logging.getLogger(__name__)


class SpeedAnalyzer(BaseAnalyzer):
    """
    Delegates measurement to Google Lighthouse.

    Collects:
    - Performance category score (used as the component score)
    - Core Web Vitals: LCP, FCP, CLS, TBT
    - Server response time (TTFB)
    """

    # Core Web Vitals "good" thresholds
    LCP_GOOD_MS = 2500
    FCP_GOOD_MS = 1800
    CLS_GOOD = 0.1
    TTFB_GOOD_MS = 800

    def __init__(self, engine: RecommendationEngine):
        self.engine = engine

    @property
    def name(self) -> str:
        return "speed"

    @property
    def label(self) -> str:
        return "Page speed"

    async def analyze(self, url: str) -> ComponentResult:
        """Run a Lighthouse performance audit on the given URL."""
        raw_data = await self._run_lighthouse(url)
        score, metrics = self._extract_metrics(raw_data)

        issues = self._collect_issues(metrics)
        recommendations = self.engine.generate_texts(
            {
                "lcp": metrics.get("lcp_ms"),
                "fcp": metrics.get("fcp_ms"),
                "cls": metrics.get("cls"),
                "ttfb": metrics.get("ttfb_ms"),
                "speedScore": score,
                "url": url,
            },
            category="speed",
        )

        return ComponentResult(
            score=score,
            issues=issues,
            recommendations=recommendations,
            metrics=metrics,
        )

    async def _run_lighthouse(self, url: str) -> dict:
        """
        Execute Lighthouse CLI and return JSON results.

        The CLI runs as an asyncio subprocess. If the audit overruns
        ``lighthouse_timeout`` or the caller cancels it (the orchestrator's
        per-analyzer timeout), the process is killed and reaped before the
        error propagates, so no Chrome instance outlives the analysis.

        Raises:
            asyncio.TimeoutError: if the audit exceeds the configured timeout
            RuntimeError: if Lighthouse produced no report
        """
        with tempfile.NamedTemporaryFile(
            mode="w",
            suffix=".json",
            delete=False,
        ) as f:
            output_path = f.name

        try:
            cmd = [
                "lighthouse",
                url,
                "--output=json",
                f"--output-path={output_path}",
                "--chrome-flags=--headless --no-sandbox --disable-gpu",
                "--quiet",
                "--only-categories=performance",
            ]

            logger.info(f"Running Lighthouse: {' '.join(cmd)}")

            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            try:
                _, stderr = await asyncio.wait_for(
                    process.communicate(),
                    timeout=settings.lighthouse_timeout,
                )
            except (asyncio.TimeoutError, asyncio.CancelledError):
                logger.warning(f"Stopping Lighthouse for {url} (pid {process.pid})")
                await self._kill(process)
                raise

            stderr_text = stderr.decode(errors="replace") if stderr else ""
            if process.returncode != 0:
                logger.warning(f"Lighthouse stderr: {stderr_text}")

            output_file = Path(output_path)
            if output_file.exists() and output_file.stat().st_size > 0:
                with open(output_file) as f:
                    return json.load(f)
            raise RuntimeError(f"Lighthouse output file not created: {stderr_text}")

        finally:
            Path(output_path).unlink(missing_ok=True)

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()

    def _extract_metrics(self, raw_data: dict) -> tuple[int, dict]:
        """
        Extract key metrics from Lighthouse JSON output.

        Returns:
            Tuple of (performance score 0-100, metrics dict)
        """
        metrics = {}

        performance = raw_data.get("categories", {}).get("performance", {})
        if performance.get("score") is None:
            raise RuntimeError("Lighthouse report has no performance score")
        score = clamp_score(performance["score"] * 100)

        audits = raw_data.get("audits", {})

        lcp = audits.get("largest-contentful-paint", {})
        if lcp.get("numericValue"):
            metrics["lcp_ms"] = round(lcp["numericValue"])

        fcp = audits.get("first-contentful-paint", {})
        if fcp.get("numericValue"):
            metrics["fcp_ms"] = round(fcp["numericValue"])

        cls = audits.get("cumulative-layout-shift", {})
        if cls.get("numericValue") is not None:
            metrics["cls"] = round(cls["numericValue"], 3)

        tbt = audits.get("total-blocking-time", {})
        if tbt.get("numericValue"):
            metrics["tbt_ms"] = round(tbt["numericValue"])

        server_time = audits.get("server-response-time", {})
        if server_time.get("numericValue"):
            metrics["ttfb_ms"] = round(server_time["numericValue"])

        # Marketing-friendly figures
        load_ms = metrics.get("lcp_ms") or metrics.get("fcp_ms") or 0
        metrics["loadTime"] = round(load_ms / 1000, 1)
        metrics["speedDescription"] = self._describe(metrics["loadTime"])
        metrics["lighthouseScore"] = score

        return score, metrics

    def _describe(self, load_seconds: float) -> str:
        if load_seconds == 0:
            return "Unable to measure"
        if load_seconds <= 1.5:
            return "Lightning fast"
        if load_seconds <= 2.5:
            return "Fast"
        if load_seconds <= 4:
            return "Moderate"
        return "Slow"

    def _collect_issues(self, metrics: dict) -> list[str]:
        issues = []
        if metrics.get("lcp_ms", 0) > self.LCP_GOOD_MS:
            issues.append(
                f"Slow Largest Contentful Paint: {metrics['lcp_ms']}ms (target under {self.LCP_GOOD_MS}ms)"
            )
        if metrics.get("fcp_ms", 0) > self.FCP_GOOD_MS:
            issues.append(
                f"Slow First Contentful Paint: {metrics['fcp_ms']}ms (target under {self.FCP_GOOD_MS}ms)"
            )
        if metrics.get("cls", 0) > self.CLS_GOOD:
            issues.append(f"High layout shift: CLS {metrics['cls']} (target under {self.CLS_GOOD})")
        if metrics.get("ttfb_ms", 0) > self.TTFB_GOOD_MS:
            issues.append(
                f"Slow server response: {metrics['ttfb_ms']}ms TTFB (target under {self.TTFB_GOOD_MS}ms)"
            )
        return issues
