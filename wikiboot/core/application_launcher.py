#!/usr/bin/env python3
"""
Application Launcher - runs the bootstrap phases and picks the launch mode.

Phases, strictly in order:
1. Logging configured from the verbose flag
2. Configuration file loaded and merged with command line values
3. Plugins discovered, context built, plugin contributions loaded
4. Updates applied to the wiki root (unless omitted)
5. Launch: install-only stop, service mode or single-command mode
"""

import logging
import sys
from typing import Optional, TextIO

from .arguments import LaunchArguments
from .bootstrap import Bootstrap, RuntimeContext
from .exceptions import CommandExecutionError, ServiceError
from .logging_setup import configure_logging
from .registry import ComponentRegistry
from .updater import Updater
from ..server.wiki_server import COMMAND_ERROR_EXIT_CODE


class ApplicationLauncher:
    """
    Launches the wiki from parsed arguments.

    launch_wiki() returns the process exit code in single-command mode and
    None otherwise: install-only, or a running service that keeps the
    process alive. A service that does not start raises ServiceError.
    """

    def __init__(self, registry: Optional[ComponentRegistry] = None,
                 logging_externally_configured: bool = False):
        self.bootstrap = Bootstrap(registry)
        self.logging_externally_configured = logging_externally_configured
        self.logger = logging.getLogger(__name__)

    def launch_wiki(self, arguments: LaunchArguments) -> Optional[int]:
        configure_logging(arguments.verbose, self.logging_externally_configured)

        config = self.bootstrap.load_configuration(arguments)
        self.bootstrap.discover_plugins(config)
        context = self.bootstrap.load_context(arguments, config)

        self.update(arguments, context)
        return self.launch(arguments, context)

    def update(self, arguments: LaunchArguments, context: RuntimeContext) -> bool:
        if arguments.omit_updates:
            self.logger.debug("Updates omitted")
            return False
        return Updater(context).update()

    def launch(self, arguments: LaunchArguments, context: RuntimeContext) -> Optional[int]:
        if arguments.install_only:
            self.logger.info("Install only, not starting the wiki service")
            self._close_request_log(context)
            return None

        started = False
        try:
            started = context.wiki_server.start()
        finally:
            if not started:
                self._close_request_log(context)
        if not started:
            raise ServiceError(f"Wiki service failed to start on port {context.port}")

        if arguments.command is not None:
            return self.execute_single_command(arguments, context)
        return None

    def _close_request_log(self, context: RuntimeContext) -> None:
        # stop() closes it once the service has started
        if context.logger is not None:
            context.logger.close()

    def execute_single_command(self, arguments: LaunchArguments, context: RuntimeContext) -> int:
        self.logger.info(f"Executing command: {arguments.command}")

        output: TextIO = sys.stdout
        try:
            if arguments.output is not None:
                self.logger.info(f"-----Command Output redirected to {arguments.output}-----")
                output = open(arguments.output, 'w', encoding='utf-8')
            else:
                self.logger.info("-----Command Output-----")
            result = context.wiki_server.execute_single_command(arguments.command, output)
            if output is sys.stdout:
                self.logger.info("-----Command Complete-----")
        except CommandExecutionError as e:
            self.logger.error(f"{e}", exc_info=True)
            return COMMAND_ERROR_EXIT_CODE
        finally:
            context.wiki_server.stop()
            # standard output is never closed here
            if output is not sys.stdout:
                output.close()

        self.logger.info(f"Command finished with {result.failure_count} failures")
        return result.exit_code
