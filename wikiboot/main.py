#!/usr/bin/env python3
"""
Process entry point: parse the command line, detect external logging
configuration and hand over to the ApplicationLauncher.
"""

import logging
import sys
from typing import List, Optional

from .core.application_launcher import ApplicationLauncher
from .core.arguments import parse_command_line, print_usage
from .core.logging_setup import apply_external_logging_config

logger = logging.getLogger(__name__)


def exit_process(exit_code: int) -> None:
    sys.exit(exit_code)


def main(argv: Optional[List[str]] = None) -> None:
    arguments = parse_command_line(sys.argv[1:] if argv is None else argv)
    if arguments is None:
        print_usage()
        exit_process(1)
        return

    externally_configured = apply_external_logging_config()
    launcher = ApplicationLauncher(logging_externally_configured=externally_configured)
    try:
        exit_code = launcher.launch_wiki(arguments)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        exit_process(1)
        return
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        exit_process(1)
        return

    # None: install-only, or a running service keeps the process alive
    if exit_code is not None:
        exit_process(exit_code)


if __name__ == "__main__":
    main()
