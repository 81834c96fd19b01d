#!/usr/bin/env python3
"""Tests for the launch phases and the single-command mode."""

import io
import os
import shutil
import socket
import tempfile
import unittest
from unittest.mock import Mock, patch

from wikiboot.core import registry as roles
from wikiboot.core.application_launcher import ApplicationLauncher
from wikiboot.core.arguments import LaunchArguments
from wikiboot.core.exceptions import ServiceError
from wikiboot.core.registry import default_registry
from wikiboot.server.import_listener import ImportTestEventListener
from wikiboot.server.responders import Response
from wikiboot.server.wiki_server import COMMAND_ERROR_EXIT_CODE, MAX_FAILURE_EXIT_CODE


class CountedResponder:
    def __init__(self, failures):
        self.failures = failures

    def make_response(self, context, request):
        return Response(body=f"ran {request.resource}\n", failure_count=self.failures)


class ExplodingResponder:
    def make_response(self, context, request):
        raise RuntimeError("test system crashed")


class TestApplicationLauncher(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_file = os.path.join(self.temp_dir, "plugins.yaml")
        with open(self.config_file, 'w', encoding='utf-8') as f:
            f.write("Responders: pass:passing, fail:failing, many:many, boom:exploding\n")
        self.registry = default_registry()
        self.registry.register(roles.RESPONDER, "passing", lambda: CountedResponder(0))
        self.registry.register(roles.RESPONDER, "failing", lambda: CountedResponder(3))
        self.registry.register(roles.RESPONDER, "many", lambda: CountedResponder(1000))
        self.registry.register(roles.RESPONDER, "exploding", ExplodingResponder)
        ImportTestEventListener._registered = False

    def tearDown(self):
        ImportTestEventListener._registered = False
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _launcher(self):
        return ApplicationLauncher(self.registry, logging_externally_configured=True)

    def _arguments(self, **overrides):
        values = dict(root_path=self.temp_dir, config_file=self.config_file, port="0")
        values.update(overrides)
        return LaunchArguments(**values)

    def _root_dir(self):
        return os.path.join(self.temp_dir, "WikiRoot")

    def test_phases_run_in_order(self):
        launcher = self._launcher()
        manager = Mock()
        with patch('wikiboot.core.application_launcher.configure_logging', manager.configure_logging), \
             patch.object(launcher.bootstrap, 'load_configuration',
                          wraps=launcher.bootstrap.load_configuration) as load_configuration, \
             patch.object(launcher.bootstrap, 'discover_plugins',
                          wraps=launcher.bootstrap.discover_plugins) as discover_plugins, \
             patch.object(launcher.bootstrap, 'load_context',
                          wraps=launcher.bootstrap.load_context) as load_context, \
             patch.object(launcher, 'update', wraps=launcher.update) as update, \
             patch.object(launcher, 'launch', return_value=None) as launch:
            manager.attach_mock(load_configuration, 'load_configuration')
            manager.attach_mock(discover_plugins, 'discover_plugins')
            manager.attach_mock(load_context, 'load_context')
            manager.attach_mock(update, 'update')
            manager.attach_mock(launch, 'launch')

            launcher.launch_wiki(self._arguments(verbose=True))

        self.assertEqual([c[0] for c in manager.mock_calls],
                         ['configure_logging', 'load_configuration', 'discover_plugins',
                          'load_context', 'update', 'launch'])
        manager.configure_logging.assert_called_once_with(True, True)

    @patch('wikiboot.server.wiki_server.WikiServer.execute_single_command')
    @patch('wikiboot.server.wiki_server.WikiServer.start')
    def test_install_only_never_starts_service(self, mock_start, mock_execute):
        result = self._launcher().launch_wiki(self._arguments(install_only=True, command="FrontPage?pass"))

        self.assertIsNone(result)
        mock_start.assert_not_called()
        mock_execute.assert_not_called()
        self.assertTrue(os.path.isdir(os.path.join(self._root_dir(), "files")))

    @patch('wikiboot.core.application_launcher.Updater')
    def test_omit_updates_skips_update_phase(self, mock_updater):
        launcher = self._launcher()
        result = launcher.launch_wiki(self._arguments(omit_updates=True, install_only=True))

        self.assertIsNone(result)
        mock_updater.assert_not_called()
        self.assertFalse(os.path.exists(os.path.join(self._root_dir(), "files")))

    def test_update_reports_whether_anything_changed(self):
        launcher = self._launcher()
        arguments = self._arguments(install_only=True)
        context = launcher.bootstrap.load_context(arguments)

        self.assertTrue(launcher.update(arguments, context))
        self.assertFalse(launcher.update(arguments, context))

    def test_successful_command_exits_zero_on_stdout(self):
        stdout = io.StringIO()
        with patch('sys.stdout', stdout):
            result = self._launcher().launch_wiki(self._arguments(command="FrontPage?pass"))

        self.assertEqual(result, 0)
        self.assertIn("ran FrontPage", stdout.getvalue())
        self.assertFalse(stdout.closed)

    def test_failures_become_exit_code(self):
        with patch('sys.stdout', io.StringIO()):
            result = self._launcher().launch_wiki(self._arguments(command="SuiteTests?fail"))

        self.assertEqual(result, 3)

    def test_failure_count_never_reaches_error_exit_code(self):
        with patch('sys.stdout', io.StringIO()):
            result = self._launcher().launch_wiki(self._arguments(command="SuiteTests?many"))

        self.assertEqual(result, MAX_FAILURE_EXIT_CODE)

    def test_output_redirected_to_file_and_closed(self):
        output_path = os.path.join(self.temp_dir, "out.txt")
        opened = []
        real_open = open

        def recording_open(*args, **kwargs):
            handle = real_open(*args, **kwargs)
            opened.append(handle)
            return handle

        stdout = io.StringIO()
        with patch('wikiboot.core.application_launcher.open', recording_open, create=True), \
             patch('sys.stdout', stdout):
            result = self._launcher().launch_wiki(
                self._arguments(command="FrontPage?fail", output=output_path))

        self.assertEqual(result, 3)
        self.assertEqual(len(opened), 1)
        self.assertTrue(opened[0].closed)
        self.assertEqual(stdout.getvalue(), "")
        with open(output_path, encoding='utf-8') as f:
            self.assertEqual(f.read(), "ran FrontPage\n")

    @patch('wikiboot.server.wiki_server.WikiServer.stop')
    def test_command_that_cannot_run(self, mock_stop):
        output_path = os.path.join(self.temp_dir, "out.txt")
        with self.assertLogs('wikiboot.core.application_launcher', level='ERROR'):
            result = self._launcher().launch_wiki(
                self._arguments(command="FrontPage?boom", output=output_path))

        self.assertEqual(result, COMMAND_ERROR_EXIT_CODE)
        mock_stop.assert_called_once_with()

    @patch('wikiboot.server.wiki_server.WikiServer.stop')
    @patch('wikiboot.server.wiki_server.WikiServer.execute_single_command')
    def test_service_stopped_when_output_cannot_be_opened(self, mock_execute, mock_stop):
        output_path = os.path.join(self.temp_dir, "missing", "out.txt")
        with self.assertLogs('wikiboot.core.application_launcher', level='INFO') as logs:
            with self.assertRaises(OSError):
                self._launcher().launch_wiki(self._arguments(command="FrontPage?pass", output=output_path))

        mock_execute.assert_not_called()
        mock_stop.assert_called_once_with()
        self.assertFalse(any("Command Complete" in line for line in logs.output))

    def test_command_complete_logged_after_stdout_run(self):
        with patch('sys.stdout', io.StringIO()), \
             self.assertLogs('wikiboot.core.application_launcher', level='INFO') as logs:
            self._launcher().launch_wiki(self._arguments(command="FrontPage?pass"))

        self.assertTrue(any("-----Command Complete-----" in line for line in logs.output))

    @patch('wikiboot.server.request_logger.RequestLogger.close')
    @patch('wikiboot.server.wiki_server.WikiServer.execute_single_command')
    @patch('wikiboot.server.wiki_server.WikiServer.start', return_value=False)
    def test_service_that_does_not_start_is_fatal(self, mock_start, mock_execute, mock_close):
        log_directory = os.path.join(self.temp_dir, "logs")
        with self.assertRaises(ServiceError):
            self._launcher().launch_wiki(
                self._arguments(command="FrontPage?pass", log_directory=log_directory))

        mock_start.assert_called_once_with()
        mock_execute.assert_not_called()
        mock_close.assert_called_once_with()

    @patch('wikiboot.server.request_logger.RequestLogger.close')
    def test_install_only_closes_request_log(self, mock_close):
        log_directory = os.path.join(self.temp_dir, "logs")
        result = self._launcher().launch_wiki(self._arguments(install_only=True, log_directory=log_directory))

        self.assertIsNone(result)
        mock_close.assert_called_once_with()

    def test_port_in_use_is_fatal(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("", 0))
            blocker.listen(1)
            port = str(blocker.getsockname()[1])
            with self.assertLogs('wikiboot.server.wiki_server', level='ERROR'):
                with self.assertRaises(ServiceError):
                    self._launcher().launch_wiki(self._arguments(port=port, command="FrontPage?pass"))

    @patch('wikiboot.server.wiki_server.WikiServer.start', side_effect=ServiceError("port taken"))
    def test_service_start_error_propagates(self, mock_start):
        with self.assertRaises(ServiceError):
            self._launcher().launch_wiki(self._arguments(command="FrontPage?pass"))

    def test_service_mode_has_no_exit_code(self):
        launcher = self._launcher()
        result = launcher.launch_wiki(self._arguments())

        self.assertIsNone(result)
        context = launcher.bootstrap.context
        self.assertTrue(context.wiki_server.running)
        context.wiki_server.stop()


if __name__ == "__main__":
    unittest.main()
