"""Telegram Markdown formatting for the consolidated alert summary."""
from datetime import datetime, timezone

from models.enums import Severity
from utils.formatters import format_timestamp

SEVERITY_EMOJI = {
    Severity.CRITICAL: "❗❗",
    Severity.WARNING: "⚠️",
    Severity.INFO: "ℹ️",
}

SEVERITY_LABELS = {
    Severity.CRITICAL: "Critical (immediate action)",
    Severity.WARNING: "Warning (needs attention)",
    Severity.INFO: "Informational",
}

DEFAULT_MAX_LISTED = 5


def count_by_severity(items) -> dict:
    counts = {Severity.CRITICAL: 0, Severity.WARNING: 0, Severity.INFO: 0}
    for item in items:
        counts[item.severity] += 1
    return counts


def most_severe(items, limit=DEFAULT_MAX_LISTED) -> list:
    """Highest tiers first, original order kept within a tier."""
    ranked = sorted(items, key=lambda item: -item.severity.rank)
    return ranked[:limit]


def format_alert_message(namespaces, scanned_at=None, max_listed=DEFAULT_MAX_LISTED) -> str:
    """Build one message covering every namespace with flagged workloads.

    Args:
        namespaces: namespace -> list of FlaggedWorkload
        scanned_at: time shown in the header (defaults to now, UTC)
        max_listed: how many workload names to list per namespace
    """
    scanned_at = scanned_at or datetime.now(timezone.utc)
    total = sum(len(items) for items in namespaces.values())

    lines = [
        "*Kubernetes Resource Report*",
        "",
        f"*Flagged:* {total} workloads need attention",
        f"*Scan time:* {format_timestamp(scanned_at)}",
        "",
    ]

    for namespace in sorted(namespaces):
        items = namespaces[namespace]
        if not items:
            continue

        lines.append(f"*Namespace:* `{namespace}`")
        lines.append(f"*Flagged workloads:* {len(items)}")

        counts = count_by_severity(items)
        for severity in (Severity.CRITICAL, Severity.WARNING, Severity.INFO):
            if counts[severity]:
                lines.append(f"*{SEVERITY_LABELS[severity]}:* {counts[severity]}")

        top = most_severe(items, max_listed)
        if top:
            lines.append("")
            lines.append("*Most severe:*")
            for item in top:
                lines.append(f"{SEVERITY_EMOJI[item.severity]} `{item.name}`")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
