# src/brokerdesk/cli.py
"""
BrokerDesk CLI

Thin command-line surface over the sync core.
Run: brokerdesk [command]

Commands:
    summary         - Sign in, load everything, print badges and finances
    signup          - Register a new account
    reset-password  - Email a password reset link
    oauth-url       - Print the OAuth sign-in URL
    settings show   - Print local settings
    settings set    - Change local settings (KEY=VALUE, profile.KEY=VALUE)
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .adapters.storage import JsonFileStorage
from .adapters.theme import DocumentTheme
from .app import DashboardApp
from .config import BrokerDeskConfig, ConfigLoader
from .core.errors import AuthError, ConfigurationError
from .infrastructure.log_config import setup_logging
from .services import PreferencesStore, finance_summary

console = Console()


def print_header(title: str):
    """Print a header."""
    console.print(f"\n[bold blue]═══ {title} ═══[/bold blue]\n")


def print_item(key: str, value: Any, status: str = ""):
    """Print a key-value item."""
    status_icons = {
        "done": "✅",
        "failed": "❌",
        "warning": "⚠️",
        "info": "ℹ️",
    }
    icon = status_icons.get(status, "")
    console.print(f"  {icon} [cyan]{key}:[/cyan] {value}")


def parse_value(raw: str) -> Any:
    """true/false become booleans; everything else stays a string."""
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return raw


def parse_assignments(pairs: List[str]) -> Dict[str, Any]:
    """
    Turn ["dark_mode=true", "profile.name=Jane"] into a settings partial.

    Raises:
        ValueError: An item has no '='
    """
    partial: Dict[str, Any] = {}
    profile: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got '{pair}'")
        if key.startswith("profile."):
            profile[key[len("profile."):]] = value
        else:
            partial[key] = parse_value(value)
    if profile:
        partial["profile"] = profile
    return partial


def _local_preferences(config: BrokerDeskConfig) -> PreferencesStore:
    store = PreferencesStore(
        JsonFileStorage(config.storage_path),
        DocumentTheme().apply,
        storage_key=config.settings_key,
    )
    store.restore()
    return store


# =============================================================================
# COMMANDS
# =============================================================================

async def cmd_summary(config: BrokerDeskConfig, email: str, password: str) -> int:
    """Sign in, hydrate and print badge counts plus finance totals."""
    app = await DashboardApp.from_config(config)
    await app.start()
    try:
        await app.session.sign_in_with_password(email, password)
        await app.session.wait_for_background()

        print_header("Dashboard")
        badges = app.badges()
        table = Table(box=box.SIMPLE)
        table.add_column("Section", style="cyan")
        table.add_column("Badge", justify="right")
        table.add_row("Inbox (unread)", str(badges.inbox))
        table.add_row("Leads", str(badges.leads))
        table.add_row("Properties", str(badges.properties))
        table.add_row("Tasks (open)", str(badges.tasks))
        table.add_row("Calendar (upcoming)", str(badges.calendar))
        console.print(table)

        print_header("Finance")
        summary = finance_summary(app.collections.transactions)
        print_item("Income", f"{summary.income:,.2f}", "done")
        print_item("Expenses", f"{summary.expense:,.2f}", "warning")
        print_item("Net", f"{summary.net:,.2f}", "info")
        console.print()

        await app.session.sign_out()
    finally:
        await app.stop()
    return 0


async def cmd_signup(config: BrokerDeskConfig, email: str, password: str, name: Optional[str]) -> int:
    app = await DashboardApp.from_config(config)
    await app.session.sign_up(email, password, name)
    print_item("Account created", email, "done")
    console.print("  Check your inbox to confirm the address.")
    return 0


async def cmd_reset_password(config: BrokerDeskConfig, email: str) -> int:
    app = await DashboardApp.from_config(config)
    await app.session.request_password_reset(email)
    print_item("Reset link sent", email, "done")
    return 0


async def cmd_oauth_url(config: BrokerDeskConfig) -> int:
    app = await DashboardApp.from_config(config)
    url = await app.session.sign_in_with_oauth()
    console.print(url)
    return 0


def cmd_settings_show(config: BrokerDeskConfig) -> int:
    store = _local_preferences(config)
    print_header("Settings")
    console.print_json(json.dumps(store.settings.model_dump(mode="json")))
    return 0


def cmd_settings_set(config: BrokerDeskConfig, pairs: List[str]) -> int:
    store = _local_preferences(config)
    partial = parse_assignments(pairs)
    if "profile" in partial:
        store.update_profile(**partial.pop("profile"))
    if partial:
        store.update(partial)
    for key in pairs:
        print_item("Set", key, "done")
    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="brokerdesk", description="BrokerDesk command line")
    parser.add_argument("--config-dir", default="config", help="Directory holding YAML config")
    parser.add_argument("--log-level", default=None, help="Override configured log level")

    sub = parser.add_subparsers(dest="command", required=True)

    summary = sub.add_parser("summary", help="Sign in and print dashboard counts")
    summary.add_argument("--email", required=True)
    summary.add_argument("--password", required=True)

    signup = sub.add_parser("signup", help="Register a new account")
    signup.add_argument("--email", required=True)
    signup.add_argument("--password", required=True)
    signup.add_argument("--name", default=None)

    reset = sub.add_parser("reset-password", help="Email a password reset link")
    reset.add_argument("--email", required=True)

    sub.add_parser("oauth-url", help="Print the OAuth sign-in URL")

    settings = sub.add_parser("settings", help="Local settings")
    settings_sub = settings.add_subparsers(dest="settings_command", required=True)
    settings_sub.add_parser("show", help="Print settings")
    settings_set = settings_sub.add_parser("set", help="Change settings")
    settings_set.add_argument("pairs", nargs="+", metavar="KEY=VALUE")

    return parser


def run(args: argparse.Namespace, config: BrokerDeskConfig) -> int:
    if args.command == "summary":
        return asyncio.run(cmd_summary(config, args.email, args.password))
    if args.command == "signup":
        return asyncio.run(cmd_signup(config, args.email, args.password, args.name))
    if args.command == "reset-password":
        return asyncio.run(cmd_reset_password(config, args.email))
    if args.command == "oauth-url":
        return asyncio.run(cmd_oauth_url(config))
    if args.settings_command == "show":
        return cmd_settings_show(config)
    return cmd_settings_set(config, args.pairs)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = ConfigLoader(args.config_dir).get()
    setup_logging(args.log_level or config.log_level)

    try:
        return run(args, config)
    except AuthError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        return 1
    except (ConfigurationError, ValueError) as e:
        console.print(f"[red]❌ {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
