# pySolix - Session and Refresh Controller
# -*- coding: utf-8 -*-
"""
 Owns the live session of one account and the metrics built from it.

 Session states:
    no_credential - nothing cached, next cycle logs in
    valid         - token with remaining lifetime, re-used as is
    expired       - token past its expiry, next cycle logs in again

 A fetch that fails with InvalidCredentials forces one new login and is
 retried once. A second InvalidCredentials ends the cycle.
"""
import logging
import threading
from typing import Callable, List, Optional, TypeVar

from pysolix.api import INVALID_REQUEST_CODE, SolixApi
from pysolix.credentials import Credentials
from pysolix.exceptions import ApiError, InvalidCredentials, PySolixException
from pysolix.metrics import Metrics

log = logging.getLogger(__name__)

CACHEFILE = "token_cache.json"
MAX_ATTEMPTS = 2  # first try plus one retry after a forced login

STATE_NO_CREDENTIAL = "no_credential"
STATE_VALID = "valid"
STATE_EXPIRED = "expired"

T = TypeVar("T")


class Solix:
    def __init__(self, username: str, password: str, country: str = "DE",
                 timezone: str = "Europe/Berlin", cachefile: str = CACHEFILE,
                 site_ids: Optional[List[str]] = None, timeout: int = 10,
                 serve_stale: bool = False, api: Optional[SolixApi] = None,
                 metrics: Optional[Metrics] = None):
        self.username = username
        self.password = password
        self.cachefile = cachefile
        self.serve_stale = serve_stale
        self.api = api or SolixApi(country, timezone, timeout)
        self.metrics = metrics or Metrics()
        self.credentials: Optional[Credentials] = Credentials.load(cachefile)
        self.site_ids: List[str] = list(site_ids or [])
        self.site_names = {}
        self.discover_sites = not self.site_ids
        self.lock = threading.Lock()

    @property
    def state(self) -> str:
        if self.credentials is None:
            return STATE_NO_CREDENTIAL
        if self.credentials.is_expired():
            return STATE_EXPIRED
        return STATE_VALID

    def login(self, force: bool = False) -> bool:
        if self.credentials is not None and not force:
            expires_in = self.credentials.remaining_seconds()
            if expires_in > 0:
                log.info(f"Credentials are still valid for {expires_in} seconds")
                return True

        try:
            login = self.api.login(self.username, self.password)
        except InvalidCredentials:
            log.error("Invalid credentials - check USERNAME and PASSWORD")
            self.credentials = None
            return False
        except PySolixException as err:
            # Keep whatever session we had, it may still be accepted
            log.error(f"Failed to login: {err}")
            return True

        log.info("Logged in successfully")
        self.credentials = Credentials.from_login(login).save(self.cachefile)
        return True

    def fetch_with_retry(self, description: str,
                         op: Callable[[Credentials], T]) -> Optional[T]:
        """
        Run op(credentials) and return its result, or None if the cycle failed.

        op is called at most MAX_ATTEMPTS times; the second call follows a
        forced login and only happens when the first raised InvalidCredentials.
        """
        for attempt in range(MAX_ATTEMPTS):
            self.login(force=attempt > 0)
            if self.credentials is None:
                log.error(f"Failed to {description}: not logged in")
                return None
            try:
                return op(self.credentials)
            except InvalidCredentials as err:
                if attempt + 1 < MAX_ATTEMPTS:
                    log.info(f"Session invalid while trying to {description} ({err}) - logging in again")
                    continue
                log.error(f"Failed to {description}: session still invalid after a new login")
                return None
            except ApiError as err:
                if err.code == INVALID_REQUEST_CODE:
                    log.error(f"Failed to {description}: Invalid request, "
                              "check COUNTRY, TIMEZONE, and SITE_IDS")
                else:
                    log.error(f"Failed to {description}: {err}")
                return None
            except PySolixException as err:
                log.error(f"Failed to {description}: {err}")
                return None
        return None

    def update_site_ids(self) -> bool:
        homepage = self.fetch_with_retry("retrieve site ids", self.api.get_site_homepage)
        if homepage is None:
            return False
        for site in homepage.site_list:
            log.info(f"Found site ({site.site_id}): {site.site_name}")
        self.site_ids = [site.site_id for site in homepage.site_list]
        self.site_names = {site.site_id: site.site_name for site in homepage.site_list}
        return True

    def update_metrics(self, site_id: str) -> bool:
        scen_info = self.fetch_with_retry(
            f"get scen info for site {site_id}",
            lambda creds: self.api.get_scen_info(creds, site_id))
        if scen_info is None:
            return False
        self.metrics.update(site_id, scen_info)
        return True

    def get_snapshot(self) -> Optional[str]:
        """
        Refresh every site and return the rendered metrics.

        Returns None when no site could be refreshed, except with serve_stale
        where previously collected metrics are returned instead.
        """
        with self.lock:
            if not self.site_ids and self.discover_sites:
                self.update_site_ids()
            results = [self.update_metrics(site_id) for site_id in self.site_ids]
            if any(results):
                return self.metrics.render()
            if self.serve_stale and self.metrics.has_data:
                log.warning("Refresh failed - serving last known metrics")
                return self.metrics.render()
            return None
