"""CLI interface to map a data file onto a mapped type."""

import logging
import sys
from argparse import ArgumentParser, Namespace
from collections.abc import Sequence
from pathlib import Path

from jsonmap import __version__
from jsonmap.config import MapperConfig
from jsonmap.exceptions import MapperError
from jsonmap.io import load_data_file
from jsonmap.print_util import write_mapped

logger = logging.getLogger(__name__)

PARSER_FIELDS = ("root_type", "collection_wrapper", "input_path")
DEFAULT_CONFIG_NAME = "jsonmap.yml"


def _make_argument_parser() -> ArgumentParser:
    """Build CLI interface."""
    parser = ArgumentParser(prog="jsonmap")
    parser.add_argument(
        "--version", "-V", action="version", version=f"%(prog)s {__version__}"
    )

    parser.add_argument("--verbose", "-v", action="count", default=0)
    parser.add_argument(
        "--check-config", action="store_true", help="Validate configuration and exit"
    )

    parser.add_argument(
        "--config",
        "--conf",
        type=Path,
        dest="config",
        metavar="PATH",
        help="Path to configuration file.",
    )
    parser.add_argument(
        "--type",
        dest="root_type",
        metavar="MODULE:TYPE",
        help="Mapped type to construct from the input.",
    )
    parser.add_argument(
        "--wrapper",
        dest="collection_wrapper",
        metavar="MODULE:TYPE",
        help="Collection type used to wrap lists of nested objects.",
    )
    parser.add_argument(
        "input_path",
        nargs="?",
        type=Path,
        metavar="INPUT",
        help="JSON or YAML file to map.",
    )

    return parser


def parse_args(args: Sequence[str]) -> Namespace:
    """Definition of the mapping CLI."""
    parser = _make_argument_parser()
    return parser.parse_args(args)


def _configure_logging(conf: MapperConfig, verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = conf.logging_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def load_config(args: Namespace) -> MapperConfig:
    """Merge CLI options over the config file, if one is found."""
    conf = MapperConfig.from_namespace(args, PARSER_FIELDS, root_path=Path.cwd())
    if args.config is not None:
        conf_file = args.config
    elif Path.cwd().joinpath(DEFAULT_CONFIG_NAME).exists():
        conf_file = Path.cwd().joinpath(DEFAULT_CONFIG_NAME)
    else:
        conf_file = None

    if conf_file is not None:
        file_conf = MapperConfig.from_file(conf_file)
        file_conf.update(conf)
        conf = file_conf
    return conf


def run(conf: MapperConfig) -> None:
    """Map the configured input file and print the resulting object."""
    conf.check_fields(("root_type", "input_path"))
    mapped_cls = conf.resolve_root_type()
    wrapper = conf.resolve_collection_wrapper()
    data = load_data_file(conf.input_path)
    logger.info("Mapping %s onto %s", conf.input_path, conf.root_type)
    mapped = mapped_cls(data, wrapper)
    write_mapped(mapped)


def main(argv: Sequence[str]) -> int:
    # Parse arguments
    args = parse_args(argv)

    try:
        conf = load_config(args)
    except (MapperError, ValueError, TypeError) as exe:
        print(f"Invalid configuration: {exe}", file=sys.stderr)
        return 1

    _configure_logging(conf, args.verbose)
    if args.verbose > 0 or args.check_config:
        print(str(conf))
    if args.check_config:
        return 0

    try:
        run(conf)
    except (MapperError, AttributeError, ValueError) as exe:
        print(f"Error: {exe}", file=sys.stderr)
        return 1
    return 0


def run_main() -> None:
    """Console script entry point."""
    sys.exit(main(sys.argv[1:]))
