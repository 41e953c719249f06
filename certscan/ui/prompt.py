"""Blocking terminal prompts awaited from the event loop."""

import asyncio
import threading
from typing import Callable


def _settle(future: asyncio.Future, result=None, error: BaseException = None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


async def ask(read_line: Callable[[str], str], question: str) -> str:
    """Run ``read_line(question)`` on a daemon thread and await the answer.

    The reader thread is never joined. When the session is cancelled
    (Ctrl-C) while a prompt is open, the loop shuts down without waiting
    for the operator to press Enter.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def worker() -> None:
        try:
            answer = read_line(question)
        except BaseException as e:
            outcome = (None, e)
        else:
            outcome = (answer, None)
        try:
            loop.call_soon_threadsafe(_settle, future, *outcome)
        except RuntimeError:
            # loop already closed
            pass

    threading.Thread(target=worker, name="certscan-prompt", daemon=True).start()
    return await future
