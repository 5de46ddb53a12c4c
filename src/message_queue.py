import threading
from queue import Queue, Empty
from typing import Optional, Union

from models import DisputeAction, Transaction

Message = Union[Transaction, DisputeAction]


class InMemoryQueue:
    """
    Thread-safe FIFO feeding a single worker.
    All synchronization is internal - callers never need to lock.
    """

    DEFAULT_TIMEOUT = 0.1

    def __init__(self):
        self._main_queue: Queue[Message] = Queue()
        self._shutdown_event = threading.Event()

    def publish_message(self, message: Message) -> None:
        """Add message to the queue. Thread-safe."""
        self._main_queue.put(message)

    def consume_message(self) -> Optional[Message]:
        """
        Get next message from the queue.
        Returns None if queue is empty after timeout.
        Thread-safe.
        """
        try:
            return self._main_queue.get(timeout=self.DEFAULT_TIMEOUT)
        except Empty:
            return None

    def is_empty(self) -> bool:
        """Check if the queue is empty."""
        return self._main_queue.empty()

    def size(self) -> int:
        """Return approximate queue size."""
        return self._main_queue.qsize()

    def shutdown(self) -> None:
        """Signal no more messages will be published."""
        self._shutdown_event.set()

    def is_shutdown(self) -> bool:
        """Check if shutdown has been signaled."""
        return self._shutdown_event.is_set()
