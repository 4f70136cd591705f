"""CLI for secretsm - work with AWS Secrets Manager."""

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from . import secrets
from .client import create_client
from .config import load_config

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Send log records to stderr through rich; --debug shows everything."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )
    # botocore is very chatty at DEBUG
    logging.getLogger("botocore").setLevel(logging.INFO if debug else logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.INFO if debug else logging.WARNING)


def print_secret_list(refs, sort: bool = False, debug: bool = False) -> None:
    if debug:
        console.print(f"[dim]Printing {len(refs)} secrets[/dim]")
    if sort:
        refs = sorted(refs, key=lambda r: r.name)

    table = Table(show_header=True)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("ARN", style="dim", overflow="fold")

    for ref in refs:
        table.add_row(escape(ref.name), escape(ref.arn))

    console.print(table)
    console.print(f"\n[dim]Total: {len(refs)} secrets[/dim]")


def print_secret_value(payload: dict, verbose: bool = False) -> None:
    table = Table(show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value", overflow="fold")
    if verbose:
        table.add_column("Type", style="dim")

    for key, value in payload.items():
        row = [escape(key), escape(secrets.render_value(value))]
        if verbose:
            row.append(type(value).__name__)
        table.add_row(*row)

    console.print(table)


def print_diff(name_a: str, name_b: str, diff: dict) -> None:
    console.rule(style="dim")
    table = Table(show_header=True)
    table.add_column(escape(name_a), style="red", overflow="fold")
    table.add_column(escape(name_b), style="green", overflow="fold")

    for left, right in diff.items():
        table.add_row(escape(left), escape(right))

    console.print(table)
    if not diff:
        console.print(f"[dim]No keys of {escape(name_a)} differ in {escape(name_b)}[/dim]")


def cmd_get(args, config, client):
    """
    List all secrets, or show one secret's payload.

    With --raw the SecretString is printed exactly as stored, for piping.
    """
    try:
        if not args.secret:
            refs = secrets.list_all_secrets(client, config.max_results)
            print_secret_list(refs, sort=args.sort, debug=config.debug)
            return 0

        if args.raw:
            print(secrets.get_secret_string(client, args.secret))
            return 0

        payload = secrets.get_secret_value(client, args.secret)
        print_secret_value(payload, verbose=args.verbose)
        return 0

    except secrets.SecretsError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1


def cmd_set(args, config, client):
    """
    Add, overwrite or remove keys of a secret and write it back.

    Arguments are checked before anything is fetched, so a bad argument
    never results in a write.
    """
    try:
        add, remove = secrets.parse_keys(args.keys)
    except secrets.SecretsError as e:
        err_console.print(f"[red]Error parsing args:[/red] {escape(str(e))}")
        err_console.print("[dim]Use: key=value to set, key- to remove[/dim]")
        return 1

    try:
        payload = secrets.update_secret(client, args.secret_name, add, remove)
        result = secrets.put_secret(client, args.secret_name, payload)
    except secrets.SecretsError as e:
        err_console.print(f"[red]Error setting secret:[/red] {escape(str(e))}")
        return 1

    for key in add:
        console.print(f"[green]Set:[/green] {escape(key)}")
    for key in remove:
        console.print(f"[green]Removed:[/green] {escape(key)}")
    console.print(
        f"[dim]{escape(args.secret_name)} version: {escape(str(result.get('VersionId', 'unknown')))}[/dim]"
    )
    return 0


def cmd_compare(args, config, client):
    """Show keys whose values differ between two secrets, in both directions."""
    try:
        payload_a = secrets.get_secret_value(client, args.secret_a)
        payload_b = secrets.get_secret_value(client, args.secret_b)
    except secrets.SecretsError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

    print_diff(args.secret_a, args.secret_b, secrets.compare_secrets(payload_a, payload_b))
    print_diff(args.secret_b, args.secret_a, secrets.compare_secrets(payload_b, payload_a))
    console.rule(style="dim")
    return 0


def cmd_keys(args, config, client):
    """List the keys stored in a secret (values never shown)."""
    try:
        keys = secrets.list_secret_keys(client, args.secret)
    except secrets.SecretsError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

    for key in keys:
        console.print(escape(key))
    return 0


COMMANDS = {
    "get": cmd_get,
    "set": cmd_set,
    "compare": cmd_compare,
    "keys": cmd_keys,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="secretsm",
        description="Work with AWS Secrets Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  secretsm get                              # List all secrets
  secretsm get --sort --max-results 50      # Sorted, 50 per request
  secretsm get my/secret                    # Show key/value payload
  secretsm get my/secret --raw              # Print the stored JSON as-is
  secretsm set --secret-name my/secret user=admin old_key-
  secretsm compare my/secret-dev my/secret-prod
  secretsm keys my/secret                   # Keys only, no values

Environment:
  AWS_REGION           Region when --region is not given
  AWS_DEFAULT_REGION   Region fallback
  SECRETSM_CONFIG      Config file (default: ~/.config/secretsm/config.yaml)
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-a", "--region", help="AWS region")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # get
    get_parser = subparsers.add_parser("get", help="List secrets, or show a secret's payload")
    get_parser.add_argument("secret", nargs="?", help="Secret name or ARN")
    get_parser.add_argument("-r", "--raw", action="store_true", help="Raw secret output")
    get_parser.add_argument("-s", "--sort", action="store_true", help="Sort list by name")
    get_parser.add_argument("-m", "--max-results", type=int, help="Max results per list request (default: 100)")
    get_parser.add_argument("-v", "--verbose", action="store_true", help="Show value types")

    # set
    set_parser = subparsers.add_parser("set", help="Set (key=value) or remove (key-) secret keys")
    set_parser.add_argument("--secret-name", required=True, help="Name of the secret to edit")
    set_parser.add_argument("keys", nargs="+", metavar="KEY", help="key=value to set, key- to remove")

    # compare
    compare_parser = subparsers.add_parser("compare", help="Compare two secrets")
    compare_parser.add_argument("secret_a", help="First secret")
    compare_parser.add_argument("secret_b", help="Second secret")

    # keys
    keys_parser = subparsers.add_parser("keys", help="List the keys of a secret")
    keys_parser.add_argument("secret", help="Secret name or ARN")

    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args.debug)

    try:
        config = load_config(
            region=args.region,
            debug=args.debug,
            max_results=getattr(args, "max_results", None),
        )
        client = create_client(config)
    except secrets.SecretsError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

    return COMMANDS[args.command](args, config, client)


if __name__ == "__main__":
    sys.exit(main())
