"""Argument parsing functionality for pmresolve."""

import argparse
from constants import Constants

def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="pmresolve",
        description=(
            "pmresolve - Detect the JavaScript package manager and version a project uses"
        ),
        add_help=True,
    )

    parser.add_argument("-d", "--directory",
                        dest="DIRECTORY",
                        help="Project directory containing package.json and lockfiles (default: .)",
                        action="store", type=str,
                        default=".")
    parser.add_argument("-q", "--query",
                        dest="QUERY",
                        help="What to resolve (default: package-manager)",
                        action="store", type=str,
                        choices=Constants.QUERIES,
                        default="package-manager")
    parser.add_argument("-n", "--name",
                        dest="NAME",
                        help="Package manager name for detect-version, installed-version and engine-constraint",
                        action="store", type=str,
                        choices=Constants.SUPPORTED_PACKAGES)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML configuration file",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: $PMRESOLVE_LOG_LEVEL or INFO)",
                        action="store",
                        type=str,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

    args = parser.parse_args(argv)
    if args.QUERY != "package-manager" and not args.NAME:
        parser.error(f"--name is required for --query {args.QUERY}")
    return args
