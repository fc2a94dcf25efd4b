"""CLI entrypoint for goldfinch."""
import os
import sys
import argparse
import logging
from pathlib import Path

from goldfinch.secrets.domains.config_loader import (
    ConfigError,
    apply_credentials,
    default_config_path,
    fetch_settings,
    load_optional_config,
    resolve_project_id,
)
from goldfinch.secrets.domains.errors import GoldfinchError
from goldfinch.secrets.domains.gcp_client import GCPSecretClient
from goldfinch.secrets.domains.models import SecretStore
from goldfinch.secrets.workflows import secret_operations
from .renderers import (
    FORMAT_JSON,
    OUTPUT_FORMATS,
    render_identifiers,
    render_matches,
    render_record,
    render_store,
)
from .validators import validate_secret_name

VERSION = "0.1.0"
SECRETS_ENV_VAR = "GOLDFINCH_SECRETS"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _emit(text: str) -> None:
    if text:
        print(text)


def _output_format(args) -> str:
    return getattr(args, "format", None) or FORMAT_JSON


def _build_client(args):
    """Load config lazily and build the store client plus fetch settings."""
    config = load_optional_config()
    apply_credentials(config)
    project_id = resolve_project_id(config, getattr(args, "project_id", None))
    return GCPSecretClient(project_id), fetch_settings(config)


def _secret_names_from_env() -> list:
    raw = os.getenv(SECRETS_ENV_VAR, "")
    return [name.strip() for name in raw.split(",") if name.strip()]


def cmd_version(args):
    """Show version information."""
    print(f"goldfinch {VERSION}")


def cmd_list(args):
    """List all secret names in the project."""
    client, _settings = _build_client(args)
    identifiers = secret_operations.list_all_secrets(client)
    _emit(render_identifiers(identifiers, _output_format(args)))


def cmd_get(args):
    """Get all key-value pairs from one or more secrets."""
    secret_names = list(args.secret_names) or _secret_names_from_env()
    if not secret_names:
        print(
            f"Error: No secret given. Pass a secret name or set {SECRETS_ENV_VAR} "
            "(comma-separated for several secrets)",
            file=sys.stderr
        )
        sys.exit(2)

    for name in secret_names:
        validate_secret_name(name)

    client, settings = _build_client(args)
    output_format = _output_format(args)

    if len(set(secret_names)) == 1:
        # Direct fetch, no listing or fan-out needed
        record = secret_operations.get_secret(client, secret_names[0], settings)
        _emit(render_record(record, output_format))
    else:
        store: SecretStore = secret_operations.get_secrets(client, secret_names, settings)
        _emit(render_store(store, output_format))


def cmd_search(args):
    """Search secret names and key names for a substring."""
    client, settings = _build_client(args)

    if args.secret:
        validate_secret_name(args.secret)
        matches = secret_operations.search_secret(client, args.secret, args.pattern, settings)
    else:
        matches = secret_operations.search_all_secrets(client, args.pattern, settings)

    _emit(render_matches(matches, _output_format(args)))


def cmd_config_set_path(args):
    """Set config file path preference."""
    from goldfinch.secrets.domains.preferences import set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference("config_path", str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path."""
    from goldfinch.secrets.domains.preferences import get_preference

    config_path_pref = get_preference("config_path")

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        if default_config.exists():
            print("Source: default")
        else:
            print("Source: default (file not found)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from goldfinch.secrets.domains.preferences import clear_preference

    clear_preference("config_path")
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def _global_options() -> argparse.ArgumentParser:
    """Options accepted both before and after the subcommand."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-f", "--format",
        choices=OUTPUT_FORMATS,
        default=argparse.SUPPRESS,
        help="Output format (default: json)"
    )
    common.add_argument(
        "--project-id",
        default=argparse.SUPPRESS,
        help="GCP project ID (defaults to GCP_PROJECT env var, then the config file)"
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Log progress to stderr"
    )
    return common


def build_parser() -> argparse.ArgumentParser:
    common = _global_options()

    parser = argparse.ArgumentParser(
        prog="goldfinch",
        parents=[common],
        description="goldfinch - read key-value pairs from GCP Secret Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Exit codes:
  0 - Success
  1 - Runtime error (authentication, network, invalid secret payload, no matches)
  2 - Usage error (invalid arguments, invalid secret name, missing configuration)

Environment variables:
  GCP_PROJECT       - GCP project ID (overrides config file)
  {SECRETS_ENV_VAR} - Comma-separated secret names used by 'get' when none are given

Configuration:
  Default location: ~/.config/goldfinch/config.yml
  Custom path: Set with 'goldfinch config set-path <path>'
        """
    )
    parser.add_argument("--version", action="version", version=f"goldfinch {VERSION}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        parents=[common],
        help="Show version information",
        description="Display the current version of goldfinch"
    )

    subparsers.add_parser(
        "list",
        parents=[common],
        help="List all secret names in the project",
        description="List every secret name, in the order GCP Secret Manager returns them."
    )

    get_parser = subparsers.add_parser(
        "get",
        parents=[common],
        formatter_class=argparse.RawDescriptionHelpFormatter,
        help="Get all key-value pairs from secrets",
        description=f"""
Fetch secrets whose payload is a JSON object and print their key-value pairs.

With one secret name the secret is fetched directly. With several, all of
them are fetched concurrently; if any fetch fails nothing is printed.
Without a name, secret names are read from {SECRETS_ENV_VAR}.
        """
    )
    get_parser.add_argument(
        "secret_names",
        nargs="*",
        metavar="SECRET",
        help="Secret name or full resource name"
    )

    search_parser = subparsers.add_parser(
        "search",
        parents=[common],
        formatter_class=argparse.RawDescriptionHelpFormatter,
        help="Search secret names and key names for a pattern",
        description="""
Case-sensitive substring search over secret names and the keys inside them.

Without --secret every secret in the project is fetched concurrently and
matching keys are shown as <secret>/<key>. A secret whose name matches is
shown as "[Secret] <name>" with its key count.
        """
    )
    search_parser.add_argument("pattern", help="Search pattern (substring match)")
    search_parser.add_argument(
        "--secret",
        help="Only search the keys of this secret (keys are shown without the secret prefix)"
    )

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage goldfinch configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the config file path in ~/.config/goldfinch/preferences.json"
    )
    config_set_path_parser.add_argument("path", help="Path to config file")

    config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="Display the current configuration file path and its source"
    )
    config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference and fall back to the default location"
    )

    parser.set_defaults(config_parser=config_parser)
    return parser


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (authentication, network, invalid payload, no matches, etc.)
        2 - Usage errors (invalid arguments, invalid secret name, missing configuration, etc.)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    if getattr(args, "verbose", False):
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "list":
            cmd_list(args)
        elif args.command == "get":
            cmd_get(args)
        elif args.command == "search":
            cmd_search(args)
        elif args.command == "config":
            if args.config_command == "set-path":
                cmd_config_set_path(args)
            elif args.config_command == "show":
                cmd_config_show(args)
            elif args.config_command == "clear":
                cmd_config_clear(args)
            else:
                args.config_parser.print_help()
                sys.exit(2)
        else:
            parser.print_help()
            sys.exit(2)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except GoldfinchError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
