"""Argument parsing functionality for pmhelper."""

import argparse
from constants import Constants


def _add_common(parser):
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        default="INFO")
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Also write logs to this file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="YAML file overriding resolver defaults",
                        action="store",
                        type=str)


def _add_tool_target(parser):
    parser.add_argument("-t", "--type",
                        dest="TOOL",
                        help="Package manager to resolve, i.e: npm, yarn, pnpm",
                        action="store", type=str.lower,
                        choices=Constants.SUPPORTED_PACKAGES,
                        required=True)
    parser.add_argument("-d", "--directory",
                        dest="DIRECTORY",
                        help="Workspace containing package.json and lockfiles",
                        action="store",
                        type=str,
                        default=".")
    parser.add_argument("-j", "--job",
                        dest="JOB_FILE",
                        help="Job file whose experiments adjust resolution",
                        action="store",
                        type=str)


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="pmhelper",
        description="Resolve, install and configure npm, yarn and pnpm for dependency updates",
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="ACTION", required=True)

    resolve_parser = subparsers.add_parser(
        "resolve", help="Print the package manager version a workspace resolves to"
    )
    _add_tool_target(resolve_parser)
    _add_common(resolve_parser)

    setup_parser = subparsers.add_parser(
        "setup", help="Resolve and install the package manager through corepack"
    )
    _add_tool_target(setup_parser)
    _add_common(setup_parser)

    job_parser = subparsers.add_parser("job", help="Validate and summarize a job file")
    job_parser.add_argument("JOB_PATH", help="Path to the job JSON file", type=str)
    job_parser.add_argument("-r", "--repo-root",
                            dest="REPO_ROOT",
                            help="Checkout of the job's repository; its source directory must exist",
                            action="store",
                            type=str)
    _add_common(job_parser)

    return parser.parse_args(argv)
