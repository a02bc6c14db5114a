class AcaE2EError(Exception):
    """Base class for every error raised by the e2e harness."""


class ConfigError(AcaE2EError):
    """Raised when a configuration value cannot be parsed."""


class RepoApiError(AcaE2EError):
    """
    Raised when the repository REST API answers with a non-2xx status,
    or when the request never reached the server (status_code is None).
    """

    def __init__(self, status_code, url, message=""):
        self.status_code = status_code
        self.url = url
        self.message = message
        super().__init__(f"{status_code} error for {url}: {message}")


class WaitTimeoutError(AcaE2EError):
    """Raised when a polled condition is not met before the timeout expires."""

    def __init__(self, description, timeout, last_value=None):
        self.description = description
        self.timeout = timeout
        self.last_value = last_value
        super().__init__(f"Timed out after {timeout}s waiting for {description} (last value: {last_value!r})")


class ElementNotFoundError(AcaE2EError):
    """Raised when a required UI element does not render before the timeout."""

    def __init__(self, what, timeout):
        self.what = what
        self.timeout = timeout
        super().__init__(f"{what} not found after {timeout}s")


class TeardownError(AcaE2EError):
    """Raised by a tolerant teardown once every cleanup step has been attempted."""

    def __init__(self, failures):
        # list of (label, exception) pairs
        self.failures = failures
        labels = ", ".join(label for label, _ in failures)
        super().__init__(f"{len(failures)} teardown step(s) failed: {labels}")
