"""Fan-out/fan-in coordination of analyzers for one request."""

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from analyzers.base import BaseAnalyzer, ComponentResult
from config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentOutcome:
    """What one analyzer invocation produced."""

    component: str
    result: ComponentResult
    succeeded: bool
    duration_ms: int


@dataclass(frozen=True)
class AnalysisReport:
    """
    The merged result of one pipeline run.

    Built once after every dispatched analyzer has settled; ``results`` is a
    read-only mapping in canonical component order.
    """

    url: str
    results: Mapping[str, ComponentResult]
    failed_components: tuple[str, ...]
    overall_score: int
    status: str = "completed"
    duration_ms: int = 0

    @property
    def succeeded_components(self) -> tuple[str, ...]:
        return tuple(name for name in self.results if name not in self.failed_components)


def round_half_up(value: float) -> int:
    """Round .5 upward (65.5 -> 66), unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def calculate_overall_score(outcomes: list[ComponentOutcome]) -> int:
    """
    Rounded mean of the scores of analyzers that succeeded.

    Failed analyzers are left out of both numerator and denominator. With no
    successes the score is 0.
    """
    scores = [outcome.result.score for outcome in outcomes if outcome.succeeded]
    if not scores:
        return 0
    return max(0, min(100, round_half_up(sum(scores) / len(scores))))


def failure_issue(analyzer: BaseAnalyzer, timed_out: bool = False) -> str:
    if timed_out:
        return f"{analyzer.label} analysis timed out"
    return f"{analyzer.label} analysis failed"


class AnalysisOrchestrator:
    """
    Runs the selected analyzers concurrently and aggregates their scores.

    Each analyzer runs under its own timeout. A raised exception or a
    timeout turns that component into a zero-result placeholder; the other
    analyzers are neither cancelled nor affected. The orchestrator waits for
    every invocation to settle before aggregating.
    """

    def __init__(
        self,
        registry: Mapping[str, BaseAnalyzer],
        timeout: float | None = None,
    ):
        self.registry = registry
        self.timeout = settings.analyzer_timeout if timeout is None else timeout

    async def run(self, url: str, components: list[str] | tuple[str, ...]) -> AnalysisReport:
        """
        Run the given canonical components against ``url``.

        Args:
            url: Validated, normalized URL
            components: Canonical names, resolved before this call

        Returns:
            AnalysisReport with one entry per requested component
        """
        # Resolution happens before any analyzer starts
        selected = [(name, self.registry[name]) for name in components]
        started = time.perf_counter()

        logger.info(f"Running {len(selected)} analyzers for {url}: {', '.join(components)}")

        # gather keeps input order; _invoke never raises, so this is a full barrier
        outcomes = await asyncio.gather(
            *(self._invoke(name, analyzer, url) for name, analyzer in selected)
        )

        overall_score = calculate_overall_score(outcomes)
        duration_ms = int((time.perf_counter() - started) * 1000)

        logger.info(
            f"Analysis of {url} finished in {duration_ms}ms, overall score {overall_score}/100"
        )

        return AnalysisReport(
            url=url,
            results=MappingProxyType({o.component: o.result for o in outcomes}),
            failed_components=tuple(o.component for o in outcomes if not o.succeeded),
            overall_score=overall_score,
            duration_ms=duration_ms,
        )

    async def _invoke(self, name: str, analyzer: BaseAnalyzer, url: str) -> ComponentOutcome:
        started = time.perf_counter()

        def elapsed() -> int:
            return int((time.perf_counter() - started) * 1000)

        try:
            result = await asyncio.wait_for(analyzer.analyze(url), timeout=self.timeout)
            if not isinstance(result, ComponentResult):
                raise TypeError(f"expected ComponentResult, got {type(result).__name__}")
        except asyncio.TimeoutError:
            logger.error(f"{name} analyzer timed out after {self.timeout}s for {url}")
            return ComponentOutcome(
                component=name,
                result=ComponentResult.placeholder(failure_issue(analyzer, timed_out=True)),
                succeeded=False,
                duration_ms=elapsed(),
            )
        except Exception as e:
            logger.exception(f"{name} analyzer failed for {url}: {e}")
            return ComponentOutcome(
                component=name,
                result=ComponentResult.placeholder(failure_issue(analyzer)),
                succeeded=False,
                duration_ms=elapsed(),
            )

        logger.info(f"{name} analyzer complete for {url}, score {result.score}")
        return ComponentOutcome(
            component=name,
            result=result,
            succeeded=True,
            duration_ms=elapsed(),
        )
