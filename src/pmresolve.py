"""pmresolve - JavaScript package manager resolution.

    Returns:
        int: Exit code
"""
import json
import logging
import os
import sys

from constants import ExitCodes, _load_yaml_config
from common.dependency_files import load_lockfiles, load_package_json
from common.logging_utils import configure_logging
from args import parse_args
from package_managers.helper import PackageManagerHelper
from package_managers.helpers import ToolchainUnavailableError


def run_query(helper, query, name=None):
    """Answers one query against a helper.

    Args:
        helper (PackageManagerHelper): Resolver built for the project.
        query (str): One of Constants.QUERIES.
        name (str, optional): Package manager name for per-name queries.

    Returns:
        dict: JSON-serialisable result.
    """
    if query == "package-manager":
        return helper.package_manager().to_dict()
    if query == "detect-version":
        return {"name": name, "version": helper.detect_version(name)}
    if query == "installed-version":
        return {"name": name, "version": helper.installed_version(name)}
    if query == "engine-constraint":
        requirement = helper.find_engine_constraints_as_requirement(name)
        return {"name": name, "constraints": requirement.constraints if requirement else None}
    raise ValueError(f"Unknown query: {query}")


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    _load_yaml_config(args.CONFIG)

    if not os.path.isdir(args.DIRECTORY):
        logging.error("Directory not found: %s, aborting", args.DIRECTORY)
        return ExitCodes.FILE_ERROR.value

    helper = PackageManagerHelper(
        load_package_json(args.DIRECTORY),
        load_lockfiles(args.DIRECTORY),
    )
    try:
        result = run_query(helper, args.QUERY, args.NAME)
    except ToolchainUnavailableError as e:
        logging.error("%s", e)
        return ExitCodes.TOOLCHAIN_ERROR.value

    sys.stdout.write(json.dumps(result, indent=2) + "\n")
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
