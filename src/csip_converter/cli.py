"""Command-line interface for csip-converter."""

import argparse
import logging
import sys
from pathlib import Path

from csip_converter.config import ConverterSettings
from csip_converter.converters import AIPToDIPConverter, PackageConverter, SIPToAIPConverter
from csip_converter.exceptions import (
    ConversionError,
    PackageFormatError,
    PackageIOError,
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _settings(args: argparse.Namespace) -> ConverterSettings:
    overrides = {}
    if args.staging_dir is not None:
        overrides["staging_dir"] = args.staging_dir
    if args.schema_dir is not None:
        overrides["schema_dir"] = args.schema_dir
    return ConverterSettings(**overrides)


def _run_conversion(args: argparse.Namespace, converter: PackageConverter) -> int:
    """Run a converter over the --input archive and report the outcome.

    Args:
        args: Parsed command-line arguments
        converter: The converter to run

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    logger = logging.getLogger(__name__)

    input_path = args.input.resolve()
    if not input_path.is_file():
        logger.error(f"Input package not found: {input_path}")
        return 1

    output_path = args.output.resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        package = converter.convert(input_path, output_path)
    except PackageFormatError as e:
        logger.error(f"Invalid input package: {e.message}")
        return 1
    except PackageIOError as e:
        logger.error(f"I/O failure: {e.message}")
        return 1
    except ConversionError as e:
        logger.error(f"Conversion failed: {e.message}")
        return 1

    logger.info(f"Created {package.type.value}: {package.id}")
    logger.info(f"  Profile: {package.profile}")
    logger.info(f"  Entries: {len(package.zip_entries)}")
    logger.info(f"  Output: {output_path}")
    return 0


def sip_to_aip(args: argparse.Namespace) -> int:
    """Execute the sip-to-aip command."""
    setup_logging(args.verbose)
    return _run_conversion(args, SIPToAIPConverter(_settings(args)))


def aip_to_dip(args: argparse.Namespace) -> int:
    """Execute the aip-to-dip command."""
    setup_logging(args.verbose)
    return _run_conversion(args, AIPToDIPConverter(_settings(args)))


def _add_conversion_arguments(parser: argparse.ArgumentParser, source: str, target: str) -> None:
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help=f"Path to the zipped {source} to convert",
    )
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help=f"Path to write the zipped {target} to",
    )
    parser.add_argument(
        "--staging-dir",
        type=Path,
        default=None,
        help="Directory for temporary staging files (default: system temp directory)",
    )
    parser.add_argument(
        "--schema-dir",
        type=Path,
        default=None,
        help="Directory with XSD files to use instead of the bundled schemas",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="csip-converter",
        description="Convert E-ARK information packages between SIP, AIP and DIP",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    sip_parser = subparsers.add_parser(
        "sip-to-aip",
        help="Convert a SIP into an AIP",
        description="Convert a zipped E-ARK Submission Information Package (SIP) into an Archival Information Package (AIP).",
    )
    _add_conversion_arguments(sip_parser, "SIP", "AIP")
    sip_parser.set_defaults(func=sip_to_aip)

    dip_parser = subparsers.add_parser(
        "aip-to-dip",
        help="Convert an AIP into a DIP",
        description="Convert a zipped E-ARK Archival Information Package (AIP) into a Dissemination Information Package (DIP).",
    )
    _add_conversion_arguments(dip_parser, "AIP", "DIP")
    dip_parser.set_defaults(func=aip_to_dip)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
