import json
import logging
import threading
from datetime import datetime, timedelta
from http import HTTPStatus
from http.server import HTTPServer, SimpleHTTPRequestHandler

import requests
from requests.exceptions import RequestException

from frame_relayer import variables

logger = logging.getLogger(__name__)

PULSE_PATH = '/pulse/'


def pulse():
    """Tell the healthcheck server that the relayer loop is alive"""
    try:
        requests.get(f'http://localhost:{variables.HEALTHCHECK_SERVER_PORT}{PULSE_PATH}', timeout=10)
    except RequestException:
        logger.warning({'msg': 'Healthcheck server is not responding.'})


class PulseRequestHandler(SimpleHTTPRequestHandler):
    """
    Docker HEALTHCHECK handler.

    GET /pulse/ refreshes the last pulse time. Any GET answers 503 once the relayer has been silent
    for MAX_CYCLE_LIFETIME_IN_SECONDS.
    """

    _last_pulse = datetime.now()

    @classmethod
    def update_last_pulse(cls):
        cls._last_pulse = datetime.now()

    @classmethod
    def is_alive(cls) -> bool:
        # Long sleeps between frames are split into chunks, each one ends with a pulse
        return datetime.now() - cls._last_pulse <= timedelta(seconds=variables.MAX_CYCLE_LIFETIME_IN_SECONDS)

    def do_GET(self):
        if self.path == PULSE_PATH:
            self.update_last_pulse()

        if self.is_alive():
            self._reply(HTTPStatus.OK, {'metrics': 'ok', 'reason': 'ok'})
        else:
            self._reply(HTTPStatus.SERVICE_UNAVAILABLE, {'metrics': 'fail', 'reason': 'timeout exceeded'})

    def _reply(self, status: HTTPStatus, body: dict):
        self.send_response(status)
        self.end_headers()
        self.wfile.write(json.dumps(body).encode() + b'\n')

    def log_request(self, *args, **kwargs):
        # Disable non-error logs
        pass


def start_pulse_server():  # pragma: no cover
    server = HTTPServer(('localhost', variables.HEALTHCHECK_SERVER_PORT), RequestHandlerClass=PulseRequestHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
