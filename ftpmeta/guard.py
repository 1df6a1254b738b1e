import asyncio
import threading
from collections import deque
from typing import Any, Awaitable, Deque, Optional, TypeVar

T = TypeVar("T")


class Guard:
    """
    First-come first-served lock for a control connection.

    An FTP control connection can only carry one command/reply exchange at a
    time. Callers may come from several places at once: coroutines on the
    loop that owns the connection, and blocking callers on other threads that
    spin up their own loop to drive the very same coroutine. asyncio.Lock is
    bound to one loop and threading.Lock would block the loop, so this keeps
    its own queue of waiters, each a future on whatever loop is waiting, and
    hands ownership straight to the next one in line on release.

    Use it as an async context manager:

        async with guard:
            reply = await channel.execute("SIZE /file")
    """

    def __init__(self) -> None:
        self.mutex = threading.Lock()  # Protects owned and waiters
        self.owned: bool = False
        self.waiters: Deque[asyncio.Future] = deque()

    @property
    def locked(self) -> bool:
        return self.owned

    async def acquire(self) -> None:
        """Wait until this caller owns the connection.

        Raises:
            asyncio.CancelledError: If cancelled while waiting. The caller
                                    never ends up owning the guard in that case.
        """
        loop = asyncio.get_running_loop()
        with self.mutex:
            if not self.owned:
                self.owned = True
                return
            future = loop.create_future()
            self.waiters.append(future)

        try:
            await future
        except asyncio.CancelledError:
            with self.mutex:
                try:
                    self.waiters.remove(future)
                    granted = False
                except ValueError:
                    granted = True  # Ownership was already handed to us
            if granted:
                self.release()
            raise

    def release(self) -> None:
        """Hand the connection to the next waiter, or mark it free."""
        with self.mutex:
            if not self.owned:
                raise RuntimeError("Guard released while not held")
            if not self.waiters:
                self.owned = False
                return
            future = self.waiters.popleft()

        # Ownership moves with the future, so owned stays True here
        future.get_loop().call_soon_threadsafe(wake, future)

    async def __aenter__(self) -> "Guard":
        await self.acquire()
        return self

    async def __aexit__(self, type, value, trace) -> None:
        self.release()


def wake(future: asyncio.Future) -> None:
    # A cancelled waiter notices it was granted and releases on its own
    if not future.done():
        future.set_result(True)


def drive(work: Awaitable[T], loop: Optional[asyncio.AbstractEventLoop] = None) -> T:
    """Run a coroutine to completion for a blocking caller.

    Without a bound loop the coroutine runs on a fresh event loop on the
    calling thread. When the connection is bound to a loop, the coroutine has
    to run there: on the calling thread if that loop is idle, or submitted to
    the thread that is running it.

    Args:
        work: Coroutine to run
        loop: Event loop the underlying connection belongs to, if any

    Returns:
        Whatever the coroutine returns

    Raises:
        RuntimeError: If called from inside a running event loop, where a
                      blocking wait would deadlock the loop
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        close(work)
        raise RuntimeError(
            "Blocking call made from inside a running event loop. Await the coroutine form instead."
        )

    if loop is None or loop.is_closed():
        return asyncio.run(work)

    if loop.is_running():
        return asyncio.run_coroutine_threadsafe(work, loop).result()

    return loop.run_until_complete(work)


def close(work: Any) -> None:
    # Avoid "coroutine was never awaited" warnings on refused work
    if asyncio.iscoroutine(work):
        work.close()
