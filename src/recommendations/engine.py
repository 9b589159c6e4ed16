"""Recommendation engine that matches templates against analysis context."""

import logging
import random
import re
from dataclasses import dataclass

from recommendations.rules import ALL_TEMPLATES, RecommendationTemplate

logger = logging.getLogger(__name__)

IMPACT_ORDER = {"High": 0, "Medium": 1, "Low": 2}

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


@dataclass(frozen=True)
class GeneratedRecommendation:
    """A rendered recommendation ready for display."""

    id: str
    text: str
    impact: str
    category: str
    affected_area: str | None = None


def _format_value(value) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else f"{value:.2f}"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def interpolate(template: str, ctx: dict) -> str:
    """Replace {{name}} placeholders with context values, keeping unknown ones."""

    def _replace(match: re.Match) -> str:
        value = ctx.get(match.group(1))
        if value is None:
            return match.group(0)
        return _format_value(value)

    return _PLACEHOLDER.sub(_replace, template)


class RecommendationEngine:
    """
    Generates recommendations by evaluating templates against a context.

    The engine:
    1. Evaluates each template's condition against the numeric context
    2. Picks one wording per matching template using the injected ``rng``
    3. Interpolates the wording from the context
    4. Sorts the result by impact (High first), keeping template order within a tier

    Which templates match is deterministic. Wording selection is driven by
    ``rng``; pass ``random.Random(seed)`` to pin it.
    """

    def __init__(
        self,
        templates: list[RecommendationTemplate] | None = None,
        rng: random.Random | None = None,
    ):
        self.templates = list(ALL_TEMPLATES if templates is None else templates)
        self.rng = rng or random.Random()

    def generate(
        self,
        ctx: dict,
        category: str | None = None,
    ) -> list[GeneratedRecommendation]:
        """
        Generate recommendations for a context.

        Args:
            ctx: Flat map of measured values (e.g. {"lcp": 4200, "cls": 0.3})
            category: Restrict to one category's templates

        Returns:
            Matching recommendations ordered High → Medium → Low
        """
        generated = []

        for template in self.templates:
            if category is not None and template.category != category:
                continue
            try:
                if not template.condition(ctx):
                    continue
            except Exception as e:
                logger.warning(f"Error evaluating template {template.id}: {e}")
                continue

            wording = self._select(template)
            generated.append(
                GeneratedRecommendation(
                    id=template.id,
                    text=interpolate(wording, ctx),
                    impact=template.impact,
                    category=template.category,
                    affected_area=template.affected_area,
                )
            )

        generated.sort(key=lambda rec: IMPACT_ORDER.get(rec.impact, 99))
        return generated

    def generate_texts(self, ctx: dict, category: str | None = None) -> list[str]:
        """Plain recommendation strings, as stored on a ComponentResult."""
        return [rec.text for rec in self.generate(ctx, category=category)]

    def _select(self, template: RecommendationTemplate) -> str:
        if len(template.templates) == 1:
            return template.templates[0]
        return self.rng.choice(template.templates)
