"""Base analyzer interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class ComponentResult:
    """
    Standard result format for all analyzers.

    Read-only once built: analyzers may pass lists and dicts, which are
    stored as tuples and a read-only mapping.
    """

    score: int  # 0-100
    issues: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    metrics: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if not 0 <= self.score <= 100:
            raise ValueError(f"Score must be within 0-100, got {self.score}")
        object.__setattr__(self, "issues", tuple(self.issues))
        object.__setattr__(self, "recommendations", tuple(self.recommendations))
        object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))

    @classmethod
    def placeholder(cls, issue: str) -> "ComponentResult":
        """Zero-result substituted for an analyzer that failed or timed out."""
        return cls(score=0, issues=(issue,))

    @classmethod
    def from_dict(cls, data: dict) -> "ComponentResult":
        return cls(
            score=int(data.get("score", 0)),
            issues=tuple(data.get("issues") or ()),
            recommendations=tuple(data.get("recommendations") or ()),
            metrics=data.get("metrics") or {},
        )

    def to_dict(self) -> dict:
        """JSON-ready copy for storage and responses."""
        return {
            "score": self.score,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
            "metrics": dict(self.metrics),
        }


class BaseAnalyzer(ABC):
    """
    Abstract base class for all analyzers.

    Analyzers are stateless and independent of each other. ``analyze`` either
    returns a ComponentResult or raises; isolating failures is left to the
    orchestrator.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the canonical component name."""
        pass

    @property
    def label(self) -> str:
        """Human-readable name used in synthetic failure issues."""
        return self.name.capitalize()

    @abstractmethod
    async def analyze(self, url: str) -> ComponentResult:
        """
        Run analysis on the given URL.

        Args:
            url: Validated absolute http(s) URL

        Returns:
            ComponentResult with score, issues, recommendations and metrics
        """
        pass


def clamp_score(value: float) -> int:
    """Round and clamp a raw score into 0-100."""
    return max(0, min(100, int(round(value))))
