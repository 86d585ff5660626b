# growwsim/utils/decorators.py
from functools import wraps

from growwsim.utils.logger import logger


def job_runner(job_name: str):
    """
    Wrap a scheduled coroutine so each run is logged and a failing run does
    not take the scheduler down with it.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            logger.info(f"Running scheduled job '{job_name}'")
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Scheduled job '{job_name}' failed: {e}", exc_info=True)
                return None
            logger.info(f"Scheduled job '{job_name}' finished")
            return result

        return wrapper

    return decorator
