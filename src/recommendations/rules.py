"""Recommendation template definitions."""

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class RecommendationTemplate:
    """A condition-matched recommendation with interchangeable wordings."""

    id: str
    category: str  # speed, fonts, images, cta, whitespace, social
    impact: str  # High, Medium, Low
    condition: Callable[[dict], bool]
    templates: tuple[str, ...]  # {{name}} placeholders are filled from the context
    affected_area: str | None = None


def _num(ctx: dict, key: str, default: float = 0) -> float:
    """Get a numeric value from the context, treating None as the default."""
    value: Any = ctx.get(key)
    return default if value is None else value


# =============================================================================
# Page Speed
# =============================================================================

SPEED_TEMPLATES = [
    RecommendationTemplate(
        id="speed-poor-lcp",
        category="speed",
        impact="High",
        condition=lambda ctx: _num(ctx, "lcp") > 4000,
        templates=(
            "Reduce Largest Contentful Paint from {{lcp}}ms to under 2500ms. Slow LCP drives visitors away before they see the offer.",
            "LCP of {{lcp}}ms is critically slow. Optimize hero images, preload key resources and reduce server response time.",
            "Fix the {{lcp}}ms LCP first. Pages that take over 4s to paint lose half their visitors.",
        ),
        affected_area="largest content element",
    ),
    RecommendationTemplate(
        id="speed-improve-lcp",
        category="speed",
        impact="High",
        condition=lambda ctx: 2500 < _num(ctx, "lcp") <= 4000,
        templates=(
            "Improve LCP from {{lcp}}ms to under 2500ms by optimizing the largest visible element.",
            "LCP of {{lcp}}ms needs work. Preload the hero image and inline critical CSS to hit the 2.5s target.",
        ),
        affected_area="hero section",
    ),
    RecommendationTemplate(
        id="speed-slow-fcp",
        category="speed",
        impact="High",
        condition=lambda ctx: _num(ctx, "fcp") > 3000,
        templates=(
            "First Contentful Paint of {{fcp}}ms is too slow. Remove render-blocking resources to show content sooner.",
            "Cut FCP from {{fcp}}ms to under 1800ms. Inline critical CSS and defer non-essential scripts.",
        ),
        affected_area="initial render",
    ),
    RecommendationTemplate(
        id="speed-fcp-needs-work",
        category="speed",
        impact="Medium",
        condition=lambda ctx: 1800 < _num(ctx, "fcp") <= 3000,
        templates=(
            "Improve FCP from {{fcp}}ms toward the 1800ms target. Move critical CSS inline and defer JavaScript.",
            "First paint at {{fcp}}ms can be faster. Eliminate render-blocking resources in the document head.",
        ),
    ),
    RecommendationTemplate(
        id="speed-poor-cls",
        category="speed",
        impact="High",
        condition=lambda ctx: _num(ctx, "cls") > 0.25,
        templates=(
            "Fix layout shift (CLS: {{cls}}). Set explicit dimensions on images and embeds to stop content jumping.",
            "CLS of {{cls}} is poor. Reserve space for dynamic content so the page does not shift while loading.",
        ),
    ),
    RecommendationTemplate(
        id="speed-moderate-cls",
        category="speed",
        impact="Medium",
        condition=lambda ctx: 0.1 < _num(ctx, "cls") <= 0.25,
        templates=(
            "Reduce layout shift from {{cls}} to under 0.1. Add aspect-ratio or explicit sizes to media elements.",
            "CLS of {{cls}} needs improvement. Find and fix the elements that jump during page load.",
        ),
    ),
    RecommendationTemplate(
        id="speed-slow-ttfb",
        category="speed",
        impact="High",
        condition=lambda ctx: _num(ctx, "ttfb") > 800,
        templates=(
            "Server response time (TTFB) of {{ttfb}}ms is slow. Add caching, a CDN or server tuning.",
            "TTFB of {{ttfb}}ms delays everything else. Enable server-side caching and serve static assets from a CDN.",
        ),
        affected_area="server response",
    ),
    RecommendationTemplate(
        id="speed-optimize-resources",
        category="speed",
        impact="Medium",
        condition=lambda ctx: 50 <= _num(ctx, "speedScore", 100) < 90,
        templates=(
            "Enable text compression (gzip/brotli) for HTML, CSS and JavaScript.",
            "Minify and combine CSS/JS files to cut the number of network requests.",
            "Set Cache-Control headers on static assets so repeat visits load from the browser cache.",
        ),
    ),
    RecommendationTemplate(
        id="speed-preload",
        category="speed",
        impact="Low",
        condition=lambda ctx: 0 < _num(ctx, "speedScore") < 95,
        templates=(
            "Use <link rel=\"preload\"> for fonts and critical images in the document head.",
            "Consider preconnecting to third-party origins to shorten connection setup.",
        ),
        affected_area="document head",
    ),
]

# =============================================================================
# Fonts
# =============================================================================

FONT_TEMPLATES = [
    RecommendationTemplate(
        id="fonts-too-many-web",
        category="fonts",
        impact="High",
        condition=lambda ctx: _num(ctx, "webFontCount") > 2,
        templates=(
            "Reduce web fonts from {{webFontCount}} to 2 or fewer. Each extra web font adds 100-300ms to load time.",
            "Cut the web font count from {{webFontCount}} to at most 2. Extra fonts block text rendering.",
        ),
        affected_area="typography",
    ),
    RecommendationTemplate(
        id="fonts-use-system-for-body",
        category="fonts",
        impact="Medium",
        condition=lambda ctx: 2 <= _num(ctx, "webFontCount") <= 3,
        templates=(
            "Switch body text to a system font stack (system-ui, -apple-system) and keep web fonts for headings.",
            "Use the system font stack for paragraphs and reserve web fonts for brand elements.",
        ),
        affected_area="body text",
    ),
    RecommendationTemplate(
        id="fonts-system-inconsistency",
        category="fonts",
        impact="Medium",
        condition=lambda ctx: _num(ctx, "systemFontCount") > 3,
        templates=(
            "Standardize on fewer font stacks. {{systemFontCount}} different families makes the typography inconsistent.",
            "Reduce font family variety from {{systemFontCount}} to 2-3 for a more cohesive design.",
        ),
        affected_area="typography",
    ),
    RecommendationTemplate(
        id="fonts-use-weights",
        category="fonts",
        impact="Low",
        condition=lambda ctx: _num(ctx, "webFontCount") > 0 or _num(ctx, "systemFontCount") > 2,
        templates=(
            "Create hierarchy with font weights (400, 600, 700) rather than extra font families.",
            "Use font-weight variations instead of more typefaces for visual distinction.",
        ),
    ),
    RecommendationTemplate(
        id="fonts-preload",
        category="fonts",
        impact="Low",
        condition=lambda ctx: 0 < _num(ctx, "webFontCount") <= 2,
        templates=(
            "Preload web fonts in <head> with font-display: swap for faster text rendering.",
            "Add <link rel=\"preload\"> for web fonts to avoid render-blocking delays.",
        ),
        affected_area="document head",
    ),
]

# =============================================================================
# Images
# =============================================================================

IMAGE_TEMPLATES = [
    RecommendationTemplate(
        id="images-missing-alt",
        category="images",
        impact="High",
        condition=lambda ctx: _num(ctx, "imagesWithoutAlt") > 0,
        templates=(
            "Add descriptive alt text to {{imagesWithoutAlt}} images for accessibility and image search.",
            "Write alt text for the {{imagesWithoutAlt}} images that lack it. Screen readers skip them today.",
        ),
    ),
    RecommendationTemplate(
        id="images-unsized",
        category="images",
        impact="Medium",
        condition=lambda ctx: _num(ctx, "oversizedImages") > 0,
        templates=(
            "Set width and height on {{oversizedImages}} images and serve them with srcset at display size.",
            "Resize {{oversizedImages}} images to their rendered dimensions and declare explicit sizes.",
        ),
    ),
    RecommendationTemplate(
        id="images-modern-formats",
        category="images",
        impact="Medium",
        condition=lambda ctx: _num(ctx, "nonModernFormatCount") > 0,
        templates=(
            "Convert {{nonModernFormatCount}} images to WebP or AVIF to cut image weight by 25-50%.",
            "Serve {{nonModernFormatCount}} legacy-format images as WebP/AVIF with a <picture> fallback.",
        ),
    ),
    RecommendationTemplate(
        id="images-lazy-load",
        category="images",
        impact="Low",
        condition=lambda ctx: _num(ctx, "totalImages") > 3 and _num(ctx, "lazyLoadedImages") == 0,
        templates=(
            "Add loading=\"lazy\" to below-the-fold images so they do not compete with the hero.",
            "Lazy-load images further down the page to speed up the first render.",
        ),
    ),
]

# =============================================================================
# Call to Action
# =============================================================================

CTA_TEMPLATES = [
    RecommendationTemplate(
        id="cta-none-found",
        category="cta",
        impact="High",
        condition=lambda ctx: _num(ctx, "ctaCount") == 0,
        templates=(
            "Add call-to-action buttons. Without CTAs, visitors have no clear path to convert.",
            "No CTAs detected. Every landing page needs a clear action button to drive conversions.",
        ),
        affected_area="entire page",
    ),
    RecommendationTemplate(
        id="cta-no-primary",
        category="cta",
        impact="High",
        condition=lambda ctx: _num(ctx, "ctaCount") > 0 and ctx.get("primaryCtaDetected") is False,
        templates=(
            "Add a prominent primary CTA button. Visitors need one obvious next step.",
            "Create a standout primary CTA with a contrasting color and specific action text.",
        ),
        affected_area="hero section",
    ),
    RecommendationTemplate(
        id="cta-none-above-fold",
        category="cta",
        impact="High",
        condition=lambda ctx: _num(ctx, "ctaCount") > 0 and _num(ctx, "ctasAboveFold") == 0,
        templates=(
            "Place at least one CTA above the fold. Many visitors never scroll.",
            "Move your primary action into the hero section so it is visible without scrolling.",
        ),
        affected_area="above the fold",
    ),
    RecommendationTemplate(
        id="cta-weak-action-words",
        category="cta",
        impact="High",
        condition=lambda ctx: len(ctx.get("weakActionWords") or []) > 0,
        templates=(
            "Replace weak CTA text ({{weakActionWords}}) with action verbs like Start, Get, Join or Try.",
            "Strengthen CTA copy. \"Start Free Trial\" outperforms generic labels like {{weakActionWords}}.",
        ),
    ),
    RecommendationTemplate(
        id="cta-add-more",
        category="cta",
        impact="Medium",
        condition=lambda ctx: _num(ctx, "ctaCount") == 1,
        templates=(
            "Repeat your CTA after each major section so visitors can convert as they scroll.",
            "Add secondary CTAs at scroll milestones. A single CTA limits conversion opportunities.",
        ),
    ),
    RecommendationTemplate(
        id="cta-urgency",
        category="cta",
        impact="Low",
        condition=lambda ctx: _num(ctx, "ctaCount") > 0 and not ctx.get("hasUrgency"),
        templates=(
            "Consider adding urgency to the primary CTA copy, such as \"Start today\".",
            "Test time-bound wording (\"now\", \"today\") on your main CTA.",
        ),
    ),
]

# =============================================================================
# Whitespace
# =============================================================================

WHITESPACE_TEMPLATES = [
    RecommendationTemplate(
        id="whitespace-cramped",
        category="whitespace",
        impact="High",
        condition=lambda ctx: _num(ctx, "whitespaceRatio", 1) < 0.25,
        templates=(
            "Increase whitespace. A {{whitespaceRatio}} whitespace ratio makes the page feel cramped.",
            "Add padding between sections. Content fills too much of the page (whitespace ratio {{whitespaceRatio}}).",
        ),
    ),
    RecommendationTemplate(
        id="whitespace-dense-sections",
        category="whitespace",
        impact="Medium",
        condition=lambda ctx: _num(ctx, "contentDensity") > 0.6,
        templates=(
            "Split dense sections. Some sections hold {{maxSectionElements}} elements; group related content with more spacing.",
            "Reduce section density by moving secondary content below the fold.",
        ),
        affected_area="content sections",
    ),
    RecommendationTemplate(
        id="whitespace-line-height",
        category="whitespace",
        impact="Medium",
        condition=lambda ctx: 0 < _num(ctx, "avgLineHeight") < 1.3,
        templates=(
            "Increase line-height from {{avgLineHeight}} to 1.5-1.6 for comfortable reading.",
            "Text lines are tight ({{avgLineHeight}}). Set body line-height to at least 1.5.",
        ),
        affected_area="body text",
    ),
    RecommendationTemplate(
        id="whitespace-clutter",
        category="whitespace",
        impact="Medium",
        condition=lambda ctx: _num(ctx, "clutterScore") > 50,
        templates=(
            "Remove visual clutter (clutter score {{clutterScore}}). Cut decorative elements that do not support the goal.",
            "Simplify the layout. A clutter score of {{clutterScore}} competes with your primary message.",
        ),
    ),
    RecommendationTemplate(
        id="whitespace-breathing-room",
        category="whitespace",
        impact="Low",
        condition=lambda ctx: 0.25 <= _num(ctx, "whitespaceRatio", 1) < 0.5,
        templates=(
            "Consider more margin around headlines and CTAs to draw attention to them.",
            "Give key elements extra breathing room so the eye lands on them first.",
        ),
    ),
]

# =============================================================================
# Social Proof
# =============================================================================

SOCIAL_TEMPLATES = [
    RecommendationTemplate(
        id="social-none",
        category="social",
        impact="High",
        condition=lambda ctx: _num(ctx, "totalElements") == 0,
        templates=(
            "Add social proof. Testimonials, reviews or client logos build the trust visitors need to convert.",
            "No social proof found. Add customer testimonials or trust badges near the primary CTA.",
        ),
        affected_area="entire page",
    ),
    RecommendationTemplate(
        id="social-above-fold",
        category="social",
        impact="High",
        condition=lambda ctx: _num(ctx, "totalElements") > 0 and not ctx.get("hasAboveFoldProof"),
        templates=(
            "Move a testimonial, rating or client logo strip above the fold.",
            "Show social proof in the hero section so trust is established immediately.",
        ),
        affected_area="above the fold",
    ),
    RecommendationTemplate(
        id="social-add-testimonials",
        category="social",
        impact="Medium",
        condition=lambda ctx: _num(ctx, "testimonialCount") == 0 and _num(ctx, "totalElements") > 0,
        templates=(
            "Add customer testimonials with names and photos to complement your other trust signals.",
            "Include 2-3 specific testimonials that name real customers and outcomes.",
        ),
    ),
    RecommendationTemplate(
        id="social-add-reviews",
        category="social",
        impact="Medium",
        condition=lambda ctx: _num(ctx, "reviewCount") == 0 and _num(ctx, "ratingCount") == 0,
        templates=(
            "Display review ratings (e.g. star scores from a review platform) to back up your claims.",
            "Add aggregate ratings from a third-party review site.",
        ),
    ),
    RecommendationTemplate(
        id="social-trust-badges",
        category="social",
        impact="Low",
        condition=lambda ctx: _num(ctx, "trustBadgeCount") == 0,
        templates=(
            "Consider adding security or certification badges near forms and checkout.",
            "Add trust badges (payment security, certifications) close to the CTA.",
        ),
    ),
]

ALL_TEMPLATES = (
    SPEED_TEMPLATES
    + FONT_TEMPLATES
    + IMAGE_TEMPLATES
    + CTA_TEMPLATES
    + WHITESPACE_TEMPLATES
    + SOCIAL_TEMPLATES
)
