# clai/signals.py
"""
SIGINT/SIGTERM handling for a single clai invocation.
"""
import asyncio
import signal
from typing import Callable, Optional

from clai.errors import InterruptError
from clai.utils.logging import get_logger

logger = get_logger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class InterruptFlag:
    """Records that an interrupt arrived; checked between pipeline steps."""

    def __init__(self):
        self.signum: Optional[int] = None

    @property
    def is_set(self) -> bool:
        return self.signum is not None

    def set(self, signum: int = signal.SIGINT) -> None:
        self.signum = signum

    def check(self) -> None:
        """
        Raise if an interrupt was recorded.

        Raises:
            InterruptError: When the flag is set.
        """
        if self.is_set:
            raise InterruptError(f"Interrupted by {signal.Signals(self.signum).name}")


def register_signal_handlers(
    flag: InterruptFlag,
    task: Optional[asyncio.Task] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> Callable[[], None]:
    """
    Install handlers that set ``flag`` and cancel ``task``.

    Args:
        flag: The invocation's interrupt flag.
        task: The pipeline task to cancel so blocking waits end promptly.
        loop: Event loop to install on; defaults to the running loop.

    Returns:
        A function removing the handlers again.
    """
    loop = loop or asyncio.get_running_loop()
    installed = []

    def _handler(signum: int) -> None:
        logger.debug(f"Received {signal.Signals(signum).name}")
        flag.set(signum)
        if task is not None and not task.done():
            task.cancel()

    for signum in HANDLED_SIGNALS:
        try:
            loop.add_signal_handler(signum, _handler, signum)
            installed.append(signum)
        except (NotImplementedError, RuntimeError) as e:
            # Not supported on this platform or outside the main thread
            logger.debug(f"Cannot install handler for {signum}: {e}")

    def remove() -> None:
        for signum in installed:
            loop.remove_signal_handler(signum)

    return remove
