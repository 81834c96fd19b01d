# wikiboot/server/wiki_server.py
import base64
import binascii
import logging
import threading
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional, TextIO, Tuple

from ..core.exceptions import CommandExecutionError, ServiceError
from .page_run import PageRunEvent
from .responders import Request, Response

logger = logging.getLogger(__name__)

MAX_FAILURE_EXIT_CODE = 254
COMMAND_ERROR_EXIT_CODE = 255


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single command: the failures its responder reported."""
    command: str
    failure_count: int = 0

    @property
    def exit_code(self) -> int:
        return min(self.failure_count, MAX_FAILURE_EXIT_CODE)


class WikiServer:
    """
    The wiki service.

    start() binds a threaded HTTP listener on the context's port; port 0
    runs in-process only, which is all single-command mode needs. The
    listener thread is not a daemon, so a started service keeps the process
    alive until stop() is called or the process is terminated.
    """

    def __init__(self, context):
        self.context = context
        self.running = False
        self._httpd: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> bool:
        if self.running:
            raise ServiceError("Wiki service is already running")
        port = self.context.port
        if port:
            try:
                self._httpd = ThreadingHTTPServer(("", port), self._make_handler())
            except OSError as e:
                logger.error(f"Unable to start wiki service on port {port}: {e}")
                return False
            self._thread = threading.Thread(target=self._httpd.serve_forever,
                                            name=f"wikiboot-{port}")
            self._thread.start()
            logger.info(f"Wiki service listening on port {port}")
        else:
            logger.info("Wiki service started without a network listener")
        self.running = True
        return True

    def stop(self) -> None:
        if self._httpd is not None:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._thread.join()
            self._httpd = None
            self._thread = None
        if self.context.logger is not None:
            self.context.logger.close()
        self.running = False
        logger.info("Wiki service stopped")

    def execute_single_command(self, command: str, output: TextIO) -> CommandResult:
        """
        Run one command through the responder registry and write its output.

        Raises:
            CommandExecutionError: the command could not be run at all
        """
        request = Request.parse(command)
        try:
            response = self._dispatch(request)
        except Exception as e:
            raise CommandExecutionError(f"Command '{command}' could not be executed: {e}") from e
        output.write(response.body)
        output.flush()
        return CommandResult(command, response.failure_count)

    def _dispatch(self, request: Request) -> Response:
        responder = self.context.responder_factory.make_responder(request)
        if not getattr(responder, 'runs_tests', False):
            return responder.make_response(self.context, request)

        root = self.context.root
        page = root.get_page(request.resource) if request.resource else root
        event = PageRunEvent(page=page, request=request, importer=getattr(responder, 'importer', None))
        listeners = self.context.page_run_listeners
        listeners.run_starting(event)
        try:
            return responder.make_response(self.context, request)
        finally:
            listeners.run_finished(event)

    def _credentials(self, header: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        if not header or not header.startswith("Basic "):
            return None, None
        try:
            decoded = base64.b64decode(header[6:]).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError):
            return None, None
        username, _, password = decoded.partition(':')
        return username, password

    def _respond(self, handler: BaseHTTPRequestHandler) -> None:
        username, password = self._credentials(handler.headers.get('Authorization'))
        if not self.context.authenticator.is_authenticated(username, password):
            response = Response(status=401, body="Unauthorized\n")
        else:
            request = Request.parse(handler.path, username=username)
            try:
                response = self._dispatch(request)
            except Exception as e:
                logger.error(f"Error serving '{handler.path}': {e}", exc_info=True)
                response = Response(status=500, body="Internal server error\n")

        body = response.body.encode('utf-8')
        handler.send_response(response.status)
        if response.status == 401:
            handler.send_header('WWW-Authenticate', 'Basic realm="wiki"')
        handler.send_header('Content-Type', response.content_type)
        handler.send_header('Content-Length', str(len(body)))
        handler.end_headers()
        handler.wfile.write(body)

        if self.context.logger is not None:
            self.context.logger.log(handler.client_address[0], handler.requestline,
                                    response.status, len(body), user=username)

    def _make_handler(self):
        wiki_server = self

        class WikiRequestHandler(BaseHTTPRequestHandler):
            def do_GET(self):
                wiki_server._respond(self)

            def log_message(self, format, *args):
                logger.debug(format % args)

        return WikiRequestHandler

    def __str__(self):
        return f"WikiServer(port={self.context.port})"
