import logging
import time

from .errors import WaitTimeoutError

logger = logging.getLogger("aca_e2e.waits")

DEFAULT_TIMEOUT = 60.0
DEFAULT_INTERVAL = 1.0


def wait_until(predicate, timeout=None, interval=None, description="condition"):
    """
    Polls a zero-argument callable until it returns a truthy value.

    Exceptions raised by the predicate are not swallowed: they propagate
    immediately so a broken query is not mistaken for "not yet".

    Args:
        predicate (callable): Called once per poll.
        timeout (float, optional): Seconds before giving up.
        interval (float, optional): Seconds between polls.
        description (str): Used in log lines and in the timeout error.

    Returns:
        The first truthy value returned by the predicate.

    Raises:
        WaitTimeoutError: If the predicate never returned a truthy value.
    """
    timeout = DEFAULT_TIMEOUT if timeout is None else timeout
    interval = DEFAULT_INTERVAL if interval is None else interval

    deadline = time.monotonic() + timeout
    attempt = 0
    while True:
        attempt += 1
        value = predicate()
        if value:
            logger.debug(f"{description} satisfied after {attempt} attempt(s).")
            return value
        if time.monotonic() >= deadline:
            logger.error(f"Gave up waiting for {description} after {attempt} attempt(s).")
            raise WaitTimeoutError(description, timeout, last_value=value)
        time.sleep(interval)


def wait_for_count(fetch_count, expect, timeout=None, interval=None, description="items"):
    """
    Waits until fetch_count() reports exactly `expect` items.

    Returns:
        int: The matching count.
    """
    observed = {"count": None}

    def matches():
        observed["count"] = fetch_count()
        return observed["count"] == expect

    try:
        wait_until(matches, timeout=timeout, interval=interval,
                   description=f"{expect} {description}")
    except WaitTimeoutError as e:
        raise WaitTimeoutError(e.description, e.timeout, last_value=observed["count"])
    return observed["count"]
