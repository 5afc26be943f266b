"""Fire-and-forget scheduling for transactional emails.

Emails are attached to the response's ``BackgroundTasks`` so they run after
the response is sent. A failing mail provider is logged and never surfaces
to the caller or rolls back the request's work.
"""

from typing import Any, Awaitable, Callable

from fastapi import BackgroundTasks

from libs.common.logging import get_logger

logger = get_logger(__name__)


async def run_safely(
    sender: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any
) -> None:
    try:
        result = await sender(*args, **kwargs)
        if result is False:
            logger.warning("Email %s was not delivered", sender.__name__)
    except Exception:
        logger.exception("Email %s failed", sender.__name__)


def dispatch_email(
    background_tasks: BackgroundTasks,
    sender: Callable[..., Awaitable[Any]],
    *args: Any,
    **kwargs: Any,
) -> None:
    background_tasks.add_task(run_safely, sender, *args, **kwargs)
