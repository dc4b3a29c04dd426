# pySolix Module
# -*- coding: utf-8 -*-
"""
 Python module to bridge Anker Solix cloud telemetry into Prometheus metrics

 For more information see README.md

 Features
    * Logs in to the Anker Solix cloud using the encrypted password protocol
    * Caches the session token on disk and re-uses it until it expires
    * Re-authenticates once and retries when the cloud invalidates a session
    * Projects site telemetry (grid, home, solar strings, solarbanks) into gauges
    * Renders the gauges in the Prometheus text exposition format

 Classes
    Solix(username, password, country, timezone, cachefile, site_ids, timeout, serve_stale)
    SolixApi(country, timezone, timeout)
    Credentials(user_id, auth_token, token_expires_at)
    Metrics()

 Functions
    login(force)              # Make sure a valid session exists (force a new login if True)
    fetch_with_retry(desc, op)  # Run op(credentials) with one re-login on an invalid session
    update_site_ids()         # Discover the sites of the account
    update_metrics(site_id)   # Refresh the gauges of one site
    get_snapshot()            # Refresh all sites and return the rendered metrics (or None)

 Requirements
    This module requires the following modules: requests, cryptography, prometheus_client
    pip install requests cryptography prometheus_client
"""
import logging
import sys

version_tuple = (0, 3, 0)
version = __version__ = '%d.%d.%d' % version_tuple
__author__ = 'pysolix'

from pysolix.exceptions import (PySolixException, InvalidCredentials, ApiError,
                                TransportError, DecodeError, ConfigError)
from pysolix.credentials import Credentials
from pysolix.crypto import CryptoSession
from pysolix.api import SolixApi
from pysolix.metrics import Metrics
from pysolix.controller import Solix, CACHEFILE

log = logging.getLogger(__name__)
log.debug('%s version %s', __name__, __version__)
log.debug('Python %s on %s', sys.version, sys.platform)


def set_debug(toggle=True, color=True):
    """Enable verbose logging"""
    if toggle:
        if color:
            logging.basicConfig(format='\x1b[31;1m%(levelname)s:%(message)s\x1b[0m', level=logging.DEBUG)
        else:
            logging.basicConfig(format='%(levelname)s:%(message)s', level=logging.DEBUG)
        log.setLevel(logging.DEBUG)
        log.debug("%s [%s]\n" % (__name__, __version__))
    else:
        log.setLevel(logging.NOTSET)
