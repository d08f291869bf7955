"""Formatting utilities for display."""


def mask_token(token, visible=8):
    """Show only the first characters of a secret: '12345678...'."""
    if not token or len(token) <= visible:
        return "********"
    return f"{token[:visible]}..."


def format_millicores(value):
    """Format CPU in millicores: 250 → '250m', 2000 → '2 cores'."""
    if value is None or value < 0:
        return "N/A"
    value = float(value)
    if value >= 1000 and value % 1000 == 0:
        cores = int(value // 1000)
        return f"{cores} core" if cores == 1 else f"{cores} cores"
    return f"{value:.0f}m"


def format_mebibytes(value):
    """Format memory in MiB: 512 → '512Mi', 2048 → '2.0Gi'."""
    if value is None or value < 0:
        return "N/A"
    value = float(value)
    if value >= 1024:
        return f"{value / 1024:.1f}Gi"
    return f"{value:.0f}Mi"


def format_pct(value, decimals=1, with_color=False):
    """Format a utilization percentage. Optionally include rich color markup."""
    if value is None:
        return "N/A"
    value = float(value)
    formatted = f"{value:.{decimals}f}%"
    if with_color:
        color = "red" if value >= 80 else "yellow" if value < 30 else "green"
        return f"[{color}]{formatted}[/{color}]"
    return formatted


def format_timestamp(ts):
    """Format a datetime to human-readable string."""
    if ts is None:
        return "N/A"
    if isinstance(ts, str):
        return ts
    return ts.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
