"""
ASCII terminal formatters for the merchant report.

Value formatters (``format_currency``, ``format_percent``, ``format_number``)
are shared with the insight and narrative text.  ``format_report_text()``
turns a ``BusinessReport`` into a plain multi-line string suitable for
``typer.echo()``.

Partial reports
---------------
When sources failed, the report opens with a ``[PARTIAL]`` banner listing
them, so a reader knows which zeros are real and which stand in for
missing data::

  [PARTIAL] 2 of 14 sources failed: Peak GMV, Referrer Data
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bfcm_report.models.report import BusinessReport

_COMPACT_UNITS: list[tuple[float, str]] = [
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
]


# ── Value formatters ──────────────────────────────────────────────────────────


def _compact(value: float) -> str:
    magnitude = abs(value)
    for size, suffix in _COMPACT_UNITS:
        if magnitude >= size:
            return f"{magnitude / size:.1f}{suffix}"
    return f"{magnitude:,.0f}"


def format_currency(value: float, compact: bool = False) -> str:
    """Format a dollar amount: ``$1,234`` or, compact, ``$1.2M``."""
    sign = "-" if value < 0 else ""
    body = _compact(value) if compact else f"{abs(value):,.0f}"
    return f"{sign}${body}"


def format_percent(value: float, show_sign: bool = True, decimals: int = 1) -> str:
    """Format a 0–100 percentage: ``+12.3%`` (or ``12.3%`` without sign)."""
    if show_sign:
        return f"{value:+.{decimals}f}%"
    return f"{value:.{decimals}f}%"


def format_number(value: float, compact: bool = False) -> str:
    """Format a count: ``12,345`` or, compact, ``12.3K``."""
    sign = "-" if value < 0 else ""
    body = _compact(value) if compact else f"{abs(value):,.0f}"
    return f"{sign}{body}"


# ── Full report ───────────────────────────────────────────────────────────────


def format_partial_banner(failed_labels: list[str], total: int) -> str:
    """Return the partial-data banner, or an empty string if nothing failed."""
    if not failed_labels:
        return ""
    return (
        f"  [PARTIAL] {len(failed_labels)} of {total} sources failed: "
        f"{', '.join(failed_labels)}"
    )


def format_report_text(report: "BusinessReport") -> str:
    """Format a complete report as plain text.

    Sections: header, headline metrics, score, insights, recommendations,
    badges and personalities.  Sections with nothing to show are skipped.

    Args:
        report: Assembled ``BusinessReport``.

    Returns:
        Multi-line string.
    """
    req = report.request
    agg = report.aggregate
    d = report.derived
    rules = report.rules
    cur, prev = agg.metrics_current, agg.metrics_previous

    lines: list[str] = []
    lines.append("")
    title = req.account_name or f"Shops {', '.join(req.shop_ids)}"
    lines.append(f"=== BFCM Report: {title} ===")
    lines.append(f"  Window:     {req.start_date} to {req.end_date}")
    lines.append(f"  Comparison: {req.comparison_start} to {req.comparison_end}")
    banner = format_partial_banner(report.failed_labels, report.total_sources)
    if banner:
        lines.append(banner)

    lines.append("")
    lines.append("--- Headline Metrics ---")
    header = f"  {'Metric':<14}  {str(req.current_year):>14}  {str(req.comparison_year):>14}  {'Change':>9}"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    lines.append(
        f"  {'GMV':<14}  {format_currency(cur.total_gmv):>14}  "
        f"{format_currency(prev.total_gmv):>14}  {format_percent(d.yoy_gmv_change_pct):>9}"
    )
    lines.append(
        f"  {'Orders':<14}  {format_number(cur.total_orders):>14}  "
        f"{format_number(prev.total_orders):>14}  {format_percent(d.yoy_orders_change_pct):>9}"
    )
    lines.append(
        f"  {'AOV':<14}  {format_currency(cur.aov):>14}  "
        f"{format_currency(prev.aov):>14}  {format_percent(d.yoy_aov_change_pct):>9}"
    )
    if agg.peak_gmv is not None:
        lines.append(
            f"  Peak minute:  {format_currency(agg.peak_gmv.peak_gmv_per_minute)}/min "
            f"at {agg.peak_gmv.peak_minute}"
        )
    if d.dominant_channel is not None:
        lines.append(
            f"  Top channel:  {d.dominant_channel.name} "
            f"({format_percent(d.dominant_channel.percentage, show_sign=False)})"
        )

    lines.append("")
    lines.append("--- Performance ---")
    lines.append(
        f"  Score: {d.performance_score}/100  Grade: {d.performance_grade}  "
        f"Growth: {d.growth_rate}"
    )
    breakdown = "  ".join(f"{k}={v}" for k, v in d.score_breakdown.items())
    lines.append(f"  Components: {breakdown}")

    lines.append("")
    lines.append("--- Insights ---")
    ins = rules.insights
    for name, text in (
        ("Growth", ins.growth),
        ("Funnel", ins.funnel),
        ("Loyalty", ins.loyalty),
        ("Channel", ins.channel),
        ("Retail", ins.retail),
        ("AOV", ins.aov),
        ("Product", ins.product),
        ("Mobile", ins.mobile),
        ("International", ins.international),
    ):
        if text:
            lines.append(f"  [{name}] {text}")

    if rules.recommendations:
        lines.append("")
        lines.append("--- Recommendations ---")
        lines.append(f"  {rules.narrative.recommendations_transition.text}")
        for i, rec in enumerate(rules.recommendations, start=1):
            lines.append(f"  {i}. [{rec.priority.upper()}] {rec.title} ({rec.category})")
            lines.append(f"     {rec.description}")
            lines.append(f"     Impact: {rec.potential_impact}")
            if rec.platform_feature:
                lines.append(f"     Try: {rec.platform_feature}")

    if rules.badges:
        lines.append("")
        lines.append("--- Badges ---")
        for badge in rules.badges:
            lines.append(f"  [{badge.visual_tag}] {badge.title}: {badge.description}")

    if rules.personalities:
        lines.append("")
        lines.append("--- Commerce Personality ---")
        for p in rules.personalities:
            lines.append(f"  [{p.visual_tag}] {p.title}: {p.description}")

    return "\n".join(lines)
