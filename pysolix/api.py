# pySolix - Anker Solix Cloud API Class
# -*- coding: utf-8 -*-
"""
 Anker Solix Cloud API Class

 Stateless protocol client for the Anker Solix cloud. The session token is
 passed in by the caller on every authenticated request.

 Class:
    SolixApi - Anker Solix Cloud API Class

 Functions:
    login(username, password)           - encrypted password login, returns Login
    get_scen_info(credentials, site_id) - telemetry document of a site
    get_site_homepage(credentials)      - sites of the account
    get_site_list(credentials)          - [(site_id, site_name)]

 Errors:
    InvalidCredentials - HTTP 401 or an expired token (checked before sending)
    ApiError           - envelope without data (vendor code and message)
    TransportError     - connection, timeout, TLS or HTTP status failure
    DecodeError        - body is not JSON or does not match the schema
"""
import hashlib
import logging
import time
from typing import Any, List, Optional, Tuple

import requests

from pysolix.credentials import Credentials
from pysolix.crypto import CryptoSession
from pysolix.data import (DataResponse, Login, ScenInfo, SiteHomepage,
                          decode_envelope)
from pysolix.exceptions import (ApiError, DecodeError, InvalidCredentials,
                                TransportError)

log = logging.getLogger(__name__)

API_HOST = "https://ankerpower-api-eu.anker.com"
API_TIMEOUT = 10  # Time in seconds to wait for a cloud response

LOGIN_API = "/passport/login"
SCEN_INFO_API = "/power_service/v1/site/get_scen_info"
SITE_HOMEPAGE_API = "/power_service/v1/site/get_site_homepage"

# Vendor code returned for a malformed request (bad country, timezone or site id)
INVALID_REQUEST_CODE = 10000


class SolixApi:
    def __init__(self, country: str, timezone: str, timeout: int = API_TIMEOUT,
                 host: str = API_HOST, crypto: Optional[CryptoSession] = None,
                 session: Optional[requests.Session] = None):
        self.country = country
        self.timezone = timezone
        self.timeout = timeout
        self.host = host
        self.crypto = crypto or CryptoSession()
        self.session = session or requests.Session()

    def headers(self, credentials: Optional[Credentials] = None) -> dict:
        headers = {
            "Country": self.country,
            "Timezone": self.timezone,
            "Model-Type": "DESKTOP",
            "App-Name": "anker_power",
            "Os-Type": "android",
        }
        if credentials is not None:
            headers["X-Auth-Token"] = credentials.auth_token
            headers["gtoken"] = hashlib.md5(credentials.user_id.encode('utf-8')).hexdigest()
        return headers

    def fetch(self, api: str, data: Optional[dict] = None,
              credentials: Optional[Credentials] = None) -> Any:
        """
        POST to the cloud and return the "data" member of the envelope.
        """
        if credentials is not None:
            expires_in = credentials.remaining_seconds()
            if expires_in <= 0:
                log.debug(f"Token expired {-expires_in}s ago - not calling {api}")
                raise InvalidCredentials("Session token expired")

        url = f"{self.host}{api}"
        log.debug(f"POST: {url}")
        try:
            if data is not None:
                response = self.session.post(url, headers=self.headers(credentials),
                                             json=data, timeout=self.timeout)
            else:
                response = self.session.post(url, headers=self.headers(credentials),
                                             timeout=self.timeout)
        except requests.exceptions.Timeout as exc:
            raise TransportError(f"Timeout waiting for {url}: {exc}") from exc
        except requests.exceptions.SSLError as exc:
            raise TransportError(f"TLS error connecting to {url}: {exc}") from exc
        except requests.exceptions.ConnectionError as exc:
            raise TransportError(f"Unable to connect to {url}: {exc}") from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        if response.status_code == 401:
            raise InvalidCredentials("Session rejected by cloud (401)")
        elif response.status_code >= 400:
            raise TransportError(f"HTTP {response.status_code} from {url}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(f"Unable to parse response from {url} as JSON: {exc}") from exc

        envelope = decode_envelope(payload)
        if not isinstance(envelope, DataResponse):
            log.debug(f"{api} failed with code {envelope.code}: {envelope.msg}")
            raise ApiError(envelope.code, envelope.msg)
        return envelope.data

    def login(self, username: str, password: str) -> Login:
        data = {
            "ab": self.country,
            "client_secret_info": {"public_key": self.crypto.public_key},
            "enc": 0,
            "email": username,
            "password": self.crypto.encrypt(password),
            "transaction": int(time.time() * 1000),
        }
        return Login.from_dict(self.fetch(LOGIN_API, data))

    def get_scen_info(self, credentials: Credentials, site_id: str) -> ScenInfo:
        return ScenInfo.from_dict(self.fetch(SCEN_INFO_API, {"site_id": site_id}, credentials))

    def get_site_homepage(self, credentials: Credentials) -> SiteHomepage:
        return SiteHomepage.from_dict(self.fetch(SITE_HOMEPAGE_API, None, credentials))

    def get_site_list(self, credentials: Credentials) -> List[Tuple[str, str]]:
        return self.get_site_homepage(credentials).sites()
