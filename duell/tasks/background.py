# duell/tasks/background.py

import asyncio

from duell.core.captcha import captcha_service
from duell.core.constants import LOGIN_SWEEP_INTERVAL_SECONDS, CAPTCHA_SWEEP_INTERVAL_SECONDS
from duell.core.logger import logger
from duell.core.rate_limit import login_guard


async def login_guard_sweeper(interval: float = LOGIN_SWEEP_INTERVAL_SECONDS):
    """Drops login records idle longer than the reset window.

    Memory hygiene only: check_attempt already expires stale records lazily.
    """
    while True:
        await asyncio.sleep(interval)
        try:
            login_guard.sweep()
        except Exception as e:
            logger.warning(f"Login guard sweep failed: {e}")


async def captcha_sweeper(interval: float = CAPTCHA_SWEEP_INTERVAL_SECONDS):
    while True:
        await asyncio.sleep(interval)
        try:
            captcha_service.cleanup()
        except Exception as e:
            logger.warning(f"Captcha cleanup failed: {e}")


def start_background_tasks() -> list[asyncio.Task]:
    return [
        asyncio.create_task(login_guard_sweeper(), name="login-guard-sweeper"),
        asyncio.create_task(captcha_sweeper(), name="captcha-sweeper"),
    ]


async def stop_background_tasks(tasks: list[asyncio.Task]):
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
