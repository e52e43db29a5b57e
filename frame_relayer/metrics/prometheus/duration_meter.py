import logging
from functools import wraps
from time import perf_counter
from typing import Callable, TypeVar

from frame_relayer.metrics.prometheus.basic import FUNCTIONS_DURATION, Status

logger = logging.getLogger(__name__)


T = TypeVar("T")


def duration_meter():
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            full_name = f"{func.__module__}.{func.__name__}"
            start = perf_counter()
            status = Status.FAILURE
            try:
                logger.debug({"msg": f"Function '{full_name}' started"})
                result = func(*args, **kwargs)
                status = Status.SUCCESS
                return result
            finally:
                duration = perf_counter() - start
                FUNCTIONS_DURATION.labels(name=full_name, status=status.value).observe(duration)
                logger.debug({"msg": f"Task '{full_name}' finished", "duration (sec)": duration})

        return wrapper

    return decorator
