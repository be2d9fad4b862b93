import logging
import random
import time
from typing import Callable, Iterable, Type, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def execute_with_retry(
    func: Callable[[], T],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.5,
    cap_seconds: float = 30.0,
    jitter: bool = True,
    retry_exceptions: Iterable[Type[BaseException]] = (Exception,),
    non_retry_exceptions: Iterable[Type[BaseException]] = (),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Execute callable with retry logic and exponential backoff.

    Args:
        func: Callable to execute.
        max_attempts: Total attempts before giving up (must be >= 1).
        base_delay: Base delay factor for exponential backoff.
        cap_seconds: Maximum delay between attempts.
        jitter: Whether to apply random jitter (80%-120%) to delay.
        retry_exceptions: Exception classes that trigger another attempt.
        non_retry_exceptions: Exception classes that are re-raised immediately.
        sleep: Function used to wait between attempts.
    """
    attempts = 0
    retry_tuple = tuple(retry_exceptions)
    non_retry_tuple = tuple(non_retry_exceptions)

    while True:
        try:
            return func()
        except non_retry_tuple:
            raise
        except retry_tuple as e:
            attempts += 1
            if attempts >= max_attempts:
                raise

            delay = base_delay**attempts
            delay = min(delay, cap_seconds)
            if jitter:
                delay *= random.uniform(0.8, 1.2)
            logger.warning(f"Attempt {attempts}/{max_attempts} failed ({e}); retrying in {delay:.1f}s")
            sleep(delay)
