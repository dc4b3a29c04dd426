#!/usr/bin/env python
# pySolix Module - Prometheus Exporter
# -*- coding: utf-8 -*-
"""
 Prometheus exporter for Anker Solix cloud telemetry

 Every scrape of /metrics refreshes the telemetry of all sites (logging in
 again when the session expired) and answers with the rendered metrics.
 When no site could be refreshed the response is an empty 500, unless
 ANKER_SOLIX_SERVE_STALE=yes and metrics were collected before.

 Endpoints
    /metrics    Prometheus text exposition (also served on /)
    /stats      Exporter counters as JSON

 Run
    python -m exporter [--config '{"username": "...", "password": "..."}']

 See exporter/config.py for the ANKER_SOLIX_* settings.
"""
import json
import logging
import signal
import sys
import threading
import time
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, HTTPServer
from socketserver import ThreadingMixIn
from urllib.parse import urlparse

from prometheus_client import CONTENT_TYPE_LATEST

import pysolix
from pysolix import ConfigError, Solix
from exporter.config import load_config

BUILD = "e3"

# Logging
log = logging.getLogger("exporter")

# Global Stats
exporterstats = {
    'pysolix': "%s Exporter %s" % (pysolix.version, BUILD),
    'gets': 0,
    'errors': 0,
    'notfound': 0,
    'uri': {},
    'ts': int(time.time()),
    'start': int(time.time()),
    'uptime': "",
    'sites': [],
}
exporterstats_lock = threading.Lock()


# Signal handler - Exit on SIGTERM
# noinspection PyUnusedLocal
def sig_term_handle(signum, frame):
    raise SystemExit


class ThreadingHTTPServer(ThreadingMixIn, HTTPServer):
    daemon_threads = True


# noinspection PyPep8Naming
class Handler(BaseHTTPRequestHandler):
    solix: Solix = None
    debugmode = False

    GET_PATH_HANDLERS = {
        '/': 'handle_metrics',
        '/metrics': 'handle_metrics',
        '/stats': 'handle_stats',
    }

    def log_message(self, log_format, *args):
        if self.debugmode:
            log.debug("%s %s" % (self.address_string(), log_format % args))

    def address_string(self):
        # replace function to avoid lookup delays
        hostaddr, hostport = self.client_address[:2]
        return hostaddr

    def do_GET(self):
        path = urlparse(self.path).path
        name = self.GET_PATH_HANDLERS.get(path)
        if name is None:
            with exporterstats_lock:
                exporterstats['notfound'] += 1
            self.send_payload(HTTPStatus.NOT_FOUND, "text/plain", b"Not Found")
            return
        getattr(self, name)(path)

    def handle_metrics(self, path):
        snapshot = self.solix.get_snapshot() if self.solix else None
        with exporterstats_lock:
            if snapshot is None:
                exporterstats['errors'] += 1
            else:
                exporterstats['gets'] += 1
                exporterstats['uri'][path] = exporterstats['uri'].get(path, 0) + 1
        if snapshot is None:
            self.send_payload(HTTPStatus.INTERNAL_SERVER_ERROR, "text/plain", b"")
        else:
            self.send_payload(HTTPStatus.OK, CONTENT_TYPE_LATEST, snapshot.encode("utf8"))

    def handle_stats(self, path):
        with exporterstats_lock:
            exporterstats['ts'] = int(time.time())
            delta = exporterstats['ts'] - exporterstats['start']
            exporterstats['uptime'] = str(time.strftime("%H:%M:%S", time.gmtime(delta)))
            exporterstats['sites'] = list(self.solix.site_ids) if self.solix else []
            message = json.dumps(exporterstats)
        self.send_payload(HTTPStatus.OK, "application/json", message.encode("utf8"))

    def send_payload(self, status, contenttype, payload: bytes):
        try:
            self.send_response(status)
            self.send_header('Content-type', contenttype)
            self.send_header('Content-Length', str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)
        except (BrokenPipeError, ConnectionResetError) as exc:
            log.debug(f"Client disconnected before payload sent [doGET]: {exc}")


def make_handler(solix: Solix, debugmode: bool = False):
    """Bind the owned Solix instance to a request handler class."""
    return type("SolixHandler", (Handler,), {'solix': solix, 'debugmode': debugmode})


def main(args=None):
    logging.basicConfig(format='%(levelname)s:%(message)s', level=logging.INFO)
    log.setLevel(logging.INFO)

    try:
        config = load_config(args)
    except ConfigError as err:
        log.error(err)
        log.error("Fatal Error: Invalid configuration. Please fix config and restart.")
        sys.exit(1)

    if config.debug:
        pysolix.set_debug(True, color=False)
        log.setLevel(logging.DEBUG)
    host, port = config.address
    log.info("pySolix [%s] Exporter [%s] - HTTP %s:%d" % (pysolix.version, BUILD, host, port))
    log.debug(f"Configuration: {config.masked()}")

    signal.signal(signal.SIGTERM, sig_term_handle)

    solix = Solix(config.username, config.password, country=config.country,
                  timezone=config.timezone, cachefile=config.cache_file,
                  site_ids=config.site_ids, timeout=config.timeout,
                  serve_stale=config.serve_stale)

    # Discovery also confirms the cached session is still accepted
    if config.site_ids:
        log.info(f"Using configured sites: {', '.join(config.site_ids)}")
    elif not solix.update_site_ids():
        log.warning("Unable to discover sites - retrying on the next scrape")

    # noinspection PyTypeChecker
    with ThreadingHTTPServer((host, port), make_handler(solix, config.debug)) as server:
        try:
            server.serve_forever()
        except (KeyboardInterrupt, SystemExit):
            print(' CANCEL \n')

    log.info("pySolix Exporter Stopped")
    sys.exit(0)


if __name__ == '__main__':
    main()
