import json
import logging
import os
import time
from dataclasses import dataclass, asdict
from typing import Optional

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """Session token returned by a successful login.

    token_expires_at is an absolute epoch timestamp in seconds.
    """
    user_id: str
    auth_token: str
    token_expires_at: int

    @classmethod
    def from_login(cls, login) -> "Credentials":
        return cls(login.user_id, login.auth_token, login.token_expires_at)

    def remaining_seconds(self, now: Optional[float] = None) -> int:
        # Negative once the token has expired
        if now is None:
            now = time.time()
        return int(self.token_expires_at - now)

    def is_expired(self, now: Optional[float] = None) -> bool:
        return self.remaining_seconds(now) <= 0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def load(cls, path: str) -> Optional["Credentials"]:
        if not os.path.exists(path):
            log.debug(f"No credentials file at {path}")
            return None
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            log.warning(f"Failed to read credentials from file ({path}): {exc}")
            return None
        try:
            user_id = data['user_id']
            auth_token = data['auth_token']
            expires_at = data['token_expires_at']
            if not isinstance(user_id, str) or not isinstance(auth_token, str):
                raise TypeError("user_id and auth_token must be strings")
            if isinstance(expires_at, bool) or not isinstance(expires_at, int):
                raise TypeError("token_expires_at must be an integer")
        except (KeyError, TypeError) as exc:
            log.warning(f"Failed to parse credentials from file ({path}): {exc!r}")
            return None
        creds = cls(user_id=user_id, auth_token=auth_token, token_expires_at=expires_at)
        log.info("Loaded credentials from file")
        return creds

    def save(self, path: str) -> "Credentials":
        parent = os.path.dirname(path)
        if parent and not os.path.exists(parent):
            try:
                os.makedirs(parent, exist_ok=True)
            except OSError as exc:
                log.warning(f"Failed to create directory for credentials file ({parent}): {exc}")
        try:
            with open(path, "w") as f:
                json.dump(self.to_dict(), f)
        except (OSError, TypeError, ValueError) as exc:
            log.warning(f"Failed to write credentials to file ({path}): {exc}")
        return self
