"""CLI entrypoint for awssm-lookup."""
import sys
import argparse
import logging

from .validators import validate_secret_id, validate_cache_stale

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    """Configure logging to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr
    )


def cmd_version(args):
    """Show version information."""
    print(f"awssm-lookup {VERSION}")


def _lookup_options(args) -> dict:
    """Options hash for lookup_with_options(), holding only what was given."""
    options = {}
    for key in ("version", "region", "cache_stale", "password_length", "exclude_characters",
                "name", "description"):
        value = getattr(args, key)
        if value is not None:
            options[key] = value
    # Flags only override the configured defaults when set
    for key in ("ignore_cache", "exclude_numbers", "exclude_punctuation", "exclude_uppercase",
                "exclude_lowercase", "include_space"):
        if getattr(args, key):
            options[key] = True
    if args.no_create:
        options["create_missing"] = False
    if args.no_require_each_type:
        options["require_each_included_type"] = False
    return options


def cmd_lookup(args):
    """Look up a secret and print it."""
    from awssm_lookup.secrets.workflows.secret_operations import lookup_with_options

    validate_secret_id(args.secret_id)
    if args.cache_stale is not None:
        validate_cache_stale(args.cache_stale)

    try:
        secret = lookup_with_options(args.secret_id, _lookup_options(args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    value = secret.unwrap()
    if secret.is_binary:
        sys.stdout.buffer.write(value)
        sys.stdout.flush()
    elif args.quiet:
        # Quiet mode: output only value, no formatting
        print(value)
    else:
        print(f"Secret '{args.secret_id}': {value}")


def cmd_region(args):
    """Show the effective region and where it came from."""
    from awssm_lookup.secrets.domains.config_loader import load_config
    from awssm_lookup.secrets.domains.region import default_region_sources, describe_region

    region, source = describe_region(args.region, default_region_sources(load_config()))
    print(f"Region: {region}")
    print(f"Source: {source}")


def cmd_config_show(args):
    """Show current config file path and effective defaults."""
    from awssm_lookup.secrets.domains.config_loader import (
        _get_config_path, default_config_path, load_config, lookup_defaults
    )

    config_path = _get_config_path()
    if config_path:
        print(f"Config path: {config_path}")
    else:
        print(f"Config path: {default_config_path()} (file not found, using built-in defaults)")

    config = load_config()
    defaults = lookup_defaults(config)
    print(f"cache_stale: {defaults['cache_stale']:g}")
    print(f"ignore_cache: {defaults['ignore_cache']}")
    print(f"region: {config.get('region', '(not set)')}")
    print(f"instance_metadata: {config.get('instance_metadata', True)}")
    for key, value in vars(defaults["create_options"]).items():
        print(f"create.{key}: {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="awssm",
        description="awssm-lookup CLI - cached AWS Secrets Manager lookups with on-demand creation",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (secret not found, service error, create failure, bad config)
  2 - Usage error (invalid arguments, invalid secret id, etc.)

Environment variables:
  AWSSM_LOOKUP_CONFIG - Path to config file
  AWS_REGION / AWS_DEFAULT_REGION - Region when not passed explicitly

Configuration:
  Default location: ~/.config/awssm-lookup/config.yml
  View current: Run 'awssm config show'
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log cache and region decisions to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of awssm-lookup"
    )

    # lookup command
    lookup_parser = subparsers.add_parser(
        "lookup",
        help="Look up a secret value",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Fetch a secret from AWS Secrets Manager.

Behavior:
  1. Resolves the region (explicit, instance metadata, environment, profile, config, us-east-2)
  2. Returns the cached value while it is fresher than --cache-stale (within same process only)
  3. Fetches from Secrets Manager
  4. Creates the secret with a generated password if it doesn't exist (unless --no-create)

Exit codes:
  0 - Secret found (or created) and printed
  1 - Secret not found, service error, or creation failed
  2 - Invalid secret id or arguments
        """
    )
    lookup_parser.add_argument("secret_id", help="Secret name or ARN")
    lookup_parser.add_argument("--version", help="Version id, or staging label (AWSCURRENT, AWSPREVIOUS, stage:<label>)")
    lookup_parser.add_argument("--region", help="AWS region (resolved automatically if not provided)")
    lookup_parser.add_argument("--cache-stale", type=float, help="Seconds a cached value stays fresh (default 1800)")
    lookup_parser.add_argument("--ignore-cache", action="store_true", help="Always fetch, then refresh the cache")
    lookup_parser.add_argument("--no-create", action="store_true", help="Fail instead of creating a missing secret")
    lookup_parser.add_argument("--password-length", type=int, help="Length of a generated password (default 32)")
    lookup_parser.add_argument("--exclude-characters", help="Characters never used in a generated password")
    lookup_parser.add_argument("--exclude-numbers", action="store_true", help="Generated password has no digits")
    lookup_parser.add_argument("--exclude-punctuation", action="store_true", help="Generated password has no punctuation")
    lookup_parser.add_argument("--exclude-uppercase", action="store_true", help="Generated password has no uppercase letters")
    lookup_parser.add_argument("--exclude-lowercase", action="store_true", help="Generated password has no lowercase letters")
    lookup_parser.add_argument("--include-space", action="store_true", help="Generated password may contain spaces")
    lookup_parser.add_argument(
        "--no-require-each-type",
        action="store_true",
        help="Don't require every included character type in a generated password"
    )
    lookup_parser.add_argument("--name", help="Name for a created secret (default: the secret id)")
    lookup_parser.add_argument("--description", help="Description for a created secret")
    lookup_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Output only the secret value (useful for scripts)"
    )

    # region command
    region_parser = subparsers.add_parser(
        "region",
        help="Show the effective region",
        description="Resolve the AWS region the same way lookups do and show which source supplied it"
    )
    region_parser.add_argument("--region", help="Explicit region (always wins)")

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Inspect awssm-lookup configuration"
    )
    config_parser.set_defaults(print_config_help=config_parser.print_help)
    config_subparsers = config_parser.add_subparsers(dest="config_command")
    config_subparsers.add_parser(
        "show",
        help="Show config path and effective defaults",
        description="Display the configuration file in use and the defaults lookups will apply"
    )

    return parser


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (not found, service, create failure, config)
        2 - Usage errors (invalid arguments, invalid secret id, etc.)
    """
    from awssm_lookup.secrets.domains.config_loader import ConfigError
    from awssm_lookup.secrets.domains.errors import SecretLookupError

    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    # If no command provided, show help and exit with usage error code
    if not args.command:
        parser.print_help()
        sys.exit(2)

    # Route to command handlers
    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "lookup":
            cmd_lookup(args)
        elif args.command == "region":
            cmd_region(args)
        elif args.command == "config":
            if args.config_command == "show":
                cmd_config_show(args)
            else:
                args.print_config_help()
                sys.exit(2)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except (SecretLookupError, ConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
