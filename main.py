#!/usr/bin/env python3
"""kubedeck alerter - CLI Entry Point."""
import sys
import json
import logging
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

import click
from rich.console import Console
from rich.table import Table

from __version__ import __version__

console = Console()
logger = logging.getLogger("kubedeck.cli")


def _init_components(config_path=None, verbose=False):
    """Lazy initialization of all components."""
    from utils.logger import setup_logging
    from config import load_config
    from service.components import build_components

    config = load_config(config_path)
    level = "DEBUG" if verbose else config["logging"].get("level", "INFO")
    setup_logging(level, config["logging"].get("file"))

    components = build_components(config)
    components["config"] = config
    return components


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config YAML")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="kubedeck")
@click.pass_context
def cli(ctx, config_path, verbose):
    """kubedeck alerter - Kubernetes resource checks with Telegram alerts."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _get_components(ctx):
    if "_components" not in ctx.obj:
        ctx.obj["_components"] = _init_components(ctx.obj.get("config_path"), ctx.obj.get("verbose"))
    return ctx.obj["_components"]


def _severity_style(severity):
    return {"critical": "bold red", "warning": "yellow"}.get(severity.value, "dim")


def _print_recommendation(recommendation):
    from utils.formatters import format_millicores, format_mebibytes

    if recommendation.message:
        console.print(f"[bold]{recommendation.message}[/bold]\n")
    if recommendation.flagged_count == 0:
        console.print("[green]No problematic workloads found.[/green]")
        return

    table = Table(title=f"Flagged Workloads ({recommendation.flagged_count})", show_header=True)
    table.add_column("Namespace", style="dim")
    table.add_column("Workload")
    table.add_column("Severity")
    table.add_column("CPU", justify="right")
    table.add_column("Memory", justify="right")
    table.add_column("Replicas", justify="right")

    for namespace, item in recommendation.iter_flagged():
        style = _severity_style(item.severity)
        table.add_row(
            namespace,
            item.name,
            f"[{style}]{item.severity.value}[/{style}]",
            format_millicores(item.cpu),
            format_mebibytes(item.memory),
            str(item.replicas) if item.replicas >= 0 else "N/A",
        )
    console.print(table)


# ──────────────────────────────────────────────────────
# RUN
# ──────────────────────────────────────────────────────
@cli.command()
@click.option("--port", default=None, type=int, help="Port to bind to")
@click.option("--host", default=None, type=str, help="Host to bind to")
@click.option("--no-web", is_flag=True, help="Run the scheduler without the admin server")
@click.pass_context
def run(ctx, port, host, no_web):
    """Start the alert scheduler and the admin server."""
    import time
    from web.app import create_app

    c = _get_components(ctx)
    web_config = c["config"]["web"]
    port = port or web_config.get("port", 8080)
    host = host or web_config.get("host", "0.0.0.0")

    scheduler = c["scheduler"]
    settings = c["settings"].get()
    scheduler.start()

    console.print("\n[bold cyan]kubedeck alerter[/bold cyan]\n")
    console.print(f"  Check interval: {settings.check_interval}s")
    console.print(f"  Chats:          {', '.join(str(i) for i in settings.chat_ids)}")
    if not no_web:
        console.print(f"  Admin server:   http://{host}:{port}")
    console.print("\n  Press Ctrl+C to stop.\n")

    try:
        if no_web:
            while True:
                time.sleep(1)
        else:
            app = create_app(c["config"], c)
            app.run(host=host, port=port, debug=False, use_reloader=False)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()


# ──────────────────────────────────────────────────────
# ANALYSIS
# ──────────────────────────────────────────────────────
@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--notify", is_flag=True, help="Send the alert summary to Telegram")
@click.pass_context
def analyze(ctx, as_json, notify):
    """Run one resource check now."""
    from monitor.collector import CollectorError
    from monitor.recommender import RecommendationError

    c = _get_components(ctx)
    try:
        if notify:
            result = c["check_cycle"].run()
            recommendation = result.recommendation
        else:
            result = None
            recommendation = c["check_cycle"].analyze()
    except (CollectorError, RecommendationError) as e:
        console.print(f"[red]Analysis failed: {e}[/red]")
        ctx.exit(1)
        return

    if as_json:
        data = result.to_dict() if result else recommendation.to_dict()
        click.echo(json.dumps(data, indent=2, default=str))
        return

    _print_recommendation(recommendation)
    if result:
        if not result.dispatched:
            console.print("[dim]No alert sent (nothing new to announce).[/dim]")
        for chat_id, ok in result.deliveries.items():
            mark = "[green]✓[/green]" if ok else "[red]✗[/red]"
            console.print(f"  {mark} chat {chat_id}")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def collect(ctx, as_json):
    """Show current usage of running pods."""
    from monitor.collector import CollectorError
    from utils.formatters import format_millicores, format_mebibytes, format_pct

    c = _get_components(ctx)
    try:
        usage = c["collector"].collect()
    except CollectorError as e:
        console.print(f"[red]Collection failed: {e}[/red]")
        ctx.exit(1)
        return

    if as_json:
        data = {ns: [w.to_dict() for w in pods] for ns, pods in usage.items()}
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title="Running Pods", show_header=True)
    table.add_column("Namespace", style="dim")
    table.add_column("Pod")
    table.add_column("CPU used / limit", justify="right")
    table.add_column("CPU %", justify="right")
    table.add_column("Mem used / limit", justify="right")
    table.add_column("Mem %", justify="right")

    for namespace in sorted(usage):
        for w in usage[namespace]:
            table.add_row(
                namespace,
                w.name,
                f"{format_millicores(w.cpu_usage)} / {format_millicores(w.cpu_limit)}",
                format_pct(w.cpu_percentage, with_color=True),
                f"{format_mebibytes(w.memory_usage)} / {format_mebibytes(w.memory_limit)}",
                format_pct(w.mem_percentage, with_color=True),
            )
    console.print(table)


# ──────────────────────────────────────────────────────
# CONFIG
# ──────────────────────────────────────────────────────
@cli.group()
def config():
    """Configuration."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx):
    """Show the effective alerting configuration."""
    from utils.formatters import mask_token

    c = _get_components(ctx)
    cfg = c["config"]
    settings = c["settings"].get()

    table = Table(title="kubedeck Configuration", show_header=False)
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    rows = [
        ("Bot token", mask_token(settings.token)),
        ("Chat ids", ", ".join(str(i) for i in settings.chat_ids)),
        ("Check interval", f"{settings.check_interval}s"),
        ("Response style", settings.response_style or "-"),
        ("Prometheus", cfg["prometheus"]["url"]),
        ("LLM endpoint", cfg["llm"]["api_url"]),
        ("LLM model", cfg["llm"]["model"]),
        ("LLM API key", mask_token(cfg["llm"].get("api_key", ""))),
        ("Deduplicate", str(cfg["alerts"].get("deduplicate", True))),
        ("Dedup window", f"{cfg['alerts'].get('dedup_window_hours', 4)}h"),
        ("Admin server", f"{cfg['web']['host']}:{cfg['web']['port']}"),
    ]
    for name, val in rows:
        table.add_row(name, val)
    console.print(table)


# ──────────────────────────────────────────────────────
# TELEGRAM
# ──────────────────────────────────────────────────────
@cli.group()
def telegram():
    """Telegram bot."""
    pass


@telegram.command("test")
@click.option("--chat-id", type=int, default=None, help="Only send to this chat")
@click.option("--send", is_flag=True, help="Send a test message, not just verify the token")
@click.pass_context
def telegram_test(ctx, chat_id, send):
    """Verify the bot token and optionally send a test message."""
    from notifications.telegram_bot import TelegramError

    c = _get_components(ctx)
    bot = c["bot"]
    settings = c["settings"]
    token = settings.get_token()
    if not token:
        console.print("[red]Telegram bot token is not configured (KUBEDECK_TELEGRAM_TOKEN).[/red]")
        ctx.exit(1)
        return

    try:
        me = bot.verify_token(token)
        username = me.get("result", {}).get("username", "?")
        console.print(f"[green]✓[/green] Token valid (@{username})")
    except TelegramError as e:
        console.print(f"[red]Token check failed: {e}[/red]")
        ctx.exit(1)
        return

    if not send:
        return

    chat_ids = [chat_id] if chat_id is not None else settings.get_chat_ids()
    for cid in chat_ids:
        try:
            bot.send_message(cid, "✅ kubedeck alerter test: Telegram is working!", token=token)
            console.print(f"[green]✓[/green] Sent to {cid}")
        except TelegramError as e:
            console.print(f"[red]✗ {cid}: {e}[/red]")


if __name__ == "__main__":
    cli()
