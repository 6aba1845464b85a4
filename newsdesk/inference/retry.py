import time
from collections.abc import Callable
from typing import TypeVar

from newsdesk.inference.exceptions import InferenceRetryableError
from newsdesk.logging.logger import Log

T = TypeVar("T")


def retry_operation(
    operation: Callable[[], T],
    *,
    retries: int = 3,
    delay_seconds: float = 2.0,
) -> T:
    """Run operation, retrying transient failures with doubling delay.

    Only InferenceRetryableError is retried. Anything else propagates on
    the first attempt. After `retries` retries the last error propagates.
    """
    attempt = 0
    delay = delay_seconds
    while True:
        try:
            return operation()
        except InferenceRetryableError as exc:
            if attempt >= retries:
                Log.error(f"Giving up after {attempt} retries: {exc}")
                raise
            attempt += 1
            Log.warning(f"Transient AI error, retry {attempt}/{retries} in {delay:g}s: {exc}")
            time.sleep(delay)
            delay *= 2
