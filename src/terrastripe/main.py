"""
Command-line interface for the Stripe attribute mapping layer.

Runs the expand / flatten / metadata-diff operations over attribute trees
stored in YAML or JSON files and prints the result as JSON on stdout. Logs go
to stderr so the output stays machine-readable.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

from terrastripe.core.attributes import expand_metadata
from terrastripe.core.exceptions import (
    ResourceMappingError,
    SchemaError,
    TerrastripeError,
    TreeLoadError,
    ValidationError,
)
from terrastripe.io.file_loader import FileLoader
from terrastripe.plugins.stripe import StripeMapper


def configure_logging(debug: bool = False, verbose: bool = False) -> None:
    """Configure application logging.

    Args:
        debug: Enable debug-level logging if True.
        verbose: Enable info-level logging from the mappers if True.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbose:
        level = logging.INFO
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    else:
        level = logging.WARNING
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stderr,
        force=True,  # Override existing configuration
    )


def show_available_kinds(mapper: StripeMapper) -> None:
    """Print the supported resource kinds."""
    print("Available Resource Kinds:")
    print("=" * 50)
    for resource_type, single in sorted(mapper.get_registered_mappers().items()):
        info = single.describe()
        flags = [] if info["deletable"] else ["not deletable"]
        if info["force_new"]:
            flags.append(f"replace on: {', '.join(info['force_new'])}")
        suffix = f" ({'; '.join(flags)})" if flags else ""
        print(f"  {resource_type:<24}{suffix}")


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="terrastripe",
        description="Expand and flatten Stripe resource attribute trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Turn a price configuration into API parameters
  terrastripe expand stripe_price price.yaml

  # Map an API response back onto the recorded attributes
  terrastripe flatten stripe_price response.json --previous state.yaml

  # Compute a metadata update
  terrastripe metadata-diff old_metadata.yaml new_metadata.yaml

  # List supported resource kinds
  terrastripe --list-kinds
        """,
    )
    parser.add_argument(
        "--list-kinds",
        action="store_true",
        help="List supported resource kinds and exit",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging for detailed output"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable info logging from the mappers",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    expand_cmd = commands.add_parser(
        "expand", help="Convert an attribute tree into API parameters"
    )
    expand_cmd.add_argument("kind", help="Resource kind (e.g. stripe_price)")
    expand_cmd.add_argument("file", type=Path, help="YAML/JSON attribute tree")

    flatten_cmd = commands.add_parser(
        "flatten", help="Map an API response back onto an attribute tree"
    )
    flatten_cmd.add_argument("kind", help="Resource kind (e.g. stripe_price)")
    flatten_cmd.add_argument("file", type=Path, help="YAML/JSON API response")
    flatten_cmd.add_argument(
        "--previous",
        type=Path,
        default=None,
        help="YAML/JSON attribute tree recorded before the read",
    )

    diff_cmd = commands.add_parser(
        "metadata-diff", help="Compute a metadata update from two snapshots"
    )
    diff_cmd.add_argument("previous", type=Path, help="Previous metadata map")
    diff_cmd.add_argument("desired", type=Path, help="Desired metadata map")

    args = parser.parse_args(argv)
    if not args.list_kinds and not args.command:
        parser.error("Must specify a command or use --list-kinds")
    return args


def run_command(args: argparse.Namespace, mapper: StripeMapper) -> Any:
    """Execute the selected command and return its JSON-serialisable result."""
    logger = logging.getLogger(__name__)

    if args.command == "expand":
        tree = FileLoader.load(args.file)
        logger.info(f"Expanding {args.kind} from {args.file}")
        return mapper.expand(args.kind, tree).to_request()

    if args.command == "flatten":
        remote = FileLoader.load(args.file)
        previous = FileLoader.load(args.previous) if args.previous else None
        logger.info(f"Flattening {args.kind} from {args.file}")
        return mapper.flatten(args.kind, remote, previous)

    previous = FileLoader.load(args.previous)
    desired = FileLoader.load(args.desired)
    return expand_metadata(previous, desired)


def main(argv: list[str] | None = None) -> NoReturn:
    """Entry point of the ``terrastripe`` command.

    Raises:
        SystemExit: Always exits with appropriate code (0 for success, >0 for
            errors).
    """
    args = parse_arguments(argv)
    configure_logging(args.debug, args.verbose)
    logger = logging.getLogger(__name__)

    try:
        mapper = StripeMapper()
        if args.list_kinds:
            show_available_kinds(mapper)
            sys.exit(0)

        result = run_command(args, mapper)
        print(json.dumps(result, indent=2, sort_keys=True))
        sys.exit(0)

    except ValidationError as e:
        logger.error(f"Validation failed: {e}")
        logger.info(f"Suggestion: {e.get_recovery_hint()}")
        sys.exit(1)
    except TreeLoadError as e:
        logger.error(f"Input error: {e}")
        sys.exit(2)
    except ResourceMappingError as e:
        logger.error(f"Resource mapping error: {e}")
        sys.exit(3)
    except SchemaError as e:
        logger.error(f"Schema error: {e}")
        sys.exit(4)
    except TerrastripeError as e:
        logger.error(f"Error: {e}")
        sys.exit(5)
    except (PermissionError, FileNotFoundError, OSError) as e:
        logger.error(f"File system error: {e}")
        sys.exit(8)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            logger.exception("Full traceback:")
        sys.exit(9)


if __name__ == "__main__":
    main()
