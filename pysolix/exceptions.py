class PySolixException(Exception):
    pass


class InvalidCredentials(PySolixException):
    """Session is missing, expired or was rejected by the cloud"""

    def __init__(self, message="Invalid credentials"):
        super().__init__(message)


class ApiError(PySolixException):
    """Business error reported by the cloud in the response envelope"""

    def __init__(self, code: int, message: str):
        super().__init__(f"API error {code}: {message}")
        self.code = code
        self.message = message


class TransportError(PySolixException):
    """Connection, TLS, timeout or HTTP level failure"""


class DecodeError(PySolixException):
    """Response did not match the expected schema"""


class ConfigError(PySolixException):
    pass
