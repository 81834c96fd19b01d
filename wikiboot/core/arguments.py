# wikiboot/core/arguments.py
"""
Command line arguments for the wiki launcher.

The grammar is fixed:

    [-v][-p port][-d dir][-r root][-l logDir][-f config][-e days][-o][-i][-a userpass][-c command][-b output]

Parsing either produces a complete LaunchArguments record or fails as a
whole; callers print usage and exit with status 1 on failure.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

from .exceptions import UsageError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 80
DEFAULT_PATH = "."
DEFAULT_ROOT = "WikiRoot"
DEFAULT_CONFIG_FILE = "plugins.yaml"
DEFAULT_VERSION_DAYS = 14


@dataclass(frozen=True)
class LaunchArguments:
    """Parsed launch request. Optional fields are None when not supplied."""
    verbose: bool = False
    port: Optional[str] = None
    root_path: Optional[str] = None
    root_directory: Optional[str] = None
    log_directory: Optional[str] = None
    config_file: str = DEFAULT_CONFIG_FILE
    days_till_versions_expire: Optional[int] = None
    userpass: Optional[str] = None
    command: Optional[str] = None
    output: Optional[str] = None
    omit_updates: bool = False
    install_only: bool = False

    @property
    def effective_port(self) -> int:
        return int(self.port) if self.port is not None else DEFAULT_PORT

    @property
    def effective_root_path(self) -> str:
        return self.root_path if self.root_path is not None else DEFAULT_PATH

    @property
    def effective_root_directory(self) -> str:
        return self.root_directory if self.root_directory is not None else DEFAULT_ROOT

    @property
    def effective_days_till_versions_expire(self) -> int:
        if self.days_till_versions_expire is None:
            return DEFAULT_VERSION_DAYS
        return self.days_till_versions_expire


class _StrictArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting the process."""

    def error(self, message):
        raise UsageError(message)


def _port(value: str) -> str:
    if not value.isdigit():
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = _StrictArgumentParser(prog="wikiboot", add_help=False, allow_abbrev=False)
    parser.add_argument("-v", dest="verbose", action="store_true")
    parser.add_argument("-p", dest="port", metavar="port", type=_port)
    parser.add_argument("-d", dest="root_path", metavar="dir")
    parser.add_argument("-r", dest="root_directory", metavar="root")
    parser.add_argument("-l", dest="log_directory", metavar="logDir")
    parser.add_argument("-f", dest="config_file", metavar="config", default=DEFAULT_CONFIG_FILE)
    parser.add_argument("-e", dest="days_till_versions_expire", metavar="days", type=int)
    parser.add_argument("-o", dest="omit_updates", action="store_true")
    parser.add_argument("-i", dest="install_only", action="store_true")
    parser.add_argument("-a", dest="userpass", metavar="userpass")
    parser.add_argument("-c", dest="command", metavar="command")
    parser.add_argument("-b", dest="output", metavar="output")
    return parser


def parse_command_line(argv: List[str]) -> Optional[LaunchArguments]:
    """
    Parse raw command line tokens.

    Returns:
        A LaunchArguments record, or None if any token is unknown, malformed
        or missing its value.
    """
    try:
        namespace = _build_parser().parse_args(argv)
    except UsageError as e:
        logger.debug(f"Command line rejected: {e}")
        return None
    return LaunchArguments(**vars(namespace))


def print_usage(stream: Optional[TextIO] = None) -> None:
    """Print usage text, including every named default, to stderr."""
    out = stream if stream is not None else sys.stderr
    print("Usage: wikiboot [-vpdrlfeoiacb]", file=out)
    print(f"\t-p <port number> {{{DEFAULT_PORT}}}", file=out)
    print(f"\t-d <working directory> {{{DEFAULT_PATH}}}", file=out)
    print(f"\t-r <page root directory> {{{DEFAULT_ROOT}}}", file=out)
    print("\t-l <log directory> {no logging}", file=out)
    print(f"\t-f <config file> {{{DEFAULT_CONFIG_FILE}}}", file=out)
    print(f"\t-e <days> {{{DEFAULT_VERSION_DAYS}}} Number of days before page versions expire", file=out)
    print("\t-o omit updates", file=out)
    print("\t-a {user:pwd | user-file-name} enable authentication.", file=out)
    print("\t-i Install only, then quit.", file=out)
    print("\t-c <command> execute single command.", file=out)
    print("\t-b <filename> redirect command output.", file=out)
    print("\t-v {off} Verbose logging", file=out)
