import csv
import logging
import threading
from typing import Dict, Iterable, List

from account import ClientAccount
from message_queue import InMemoryQueue
from models import AccountSnapshot, ProcessingResult, ProcessingStats
from row_parser import parse_csv_row
from state_manager import StateManager
from transaction_processor import Event, TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Reads transaction rows and applies them to client accounts.

    With num_workers <= 1 every row is applied in input order on the calling
    thread. With more workers, rows are sharded by client id: one publisher
    thread routes each event to the queue of the worker owning that client, so
    per-client ordering matches the input and no account is shared.
    """

    def __init__(self, num_workers: int = 1, verify_invariants: bool = False):
        self._num_workers = max(1, num_workers)
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state, verify_invariants=verify_invariants)
        self._stats = ProcessingStats()

        self._stop_event = threading.Event()
        self._errors: List[BaseException] = []
        self._errors_lock = threading.Lock()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", newline="") as f:
            return self.process_rows(csv.DictReader(f))

    def process_rows(self, rows: Iterable[Dict]) -> Dict[int, ClientAccount]:
        """Process csv.DictReader-style rows and return final account states."""
        if self._num_workers == 1:
            logger.info("Processing sequentially")
            for event in self._parse_rows(rows):
                self._apply(event)
        else:
            self._process_sharded(rows)

        return self._state.get_all_accounts()

    def snapshots(self) -> List[AccountSnapshot]:
        """Final account snapshots ordered by client id."""
        return self._state.snapshots()

    def _process_sharded(self, rows: Iterable[Dict]) -> None:
        logger.info(f"Processing with {self._num_workers} workers")
        queues = [InMemoryQueue() for _ in range(self._num_workers)]

        workers = []
        for worker_queue in queues:
            worker = threading.Thread(target=self._run_worker, args=(worker_queue,))
            worker.start()
            workers.append(worker)

        publisher = threading.Thread(target=self._publish_events, args=(rows, queues))
        publisher.start()
        publisher.join()

        for worker_queue in queues:
            worker_queue.shutdown()
        for worker in workers:
            worker.join()

        if self._errors:
            raise self._errors[0]

        logger.info("Sharded processing complete")

    def _publish_events(self, rows: Iterable[Dict], queues: List[InMemoryQueue]) -> None:
        """Route parsed events to the worker owning their client id."""
        try:
            for event in self._parse_rows(rows):
                if self._stop_event.is_set():
                    logger.warning("Worker failure, stopping publisher")
                    return
                queues[event.client_id % len(queues)].publish_message(event)
        except Exception as e:
            self._record_error(e)

    def _run_worker(self, worker_queue: InMemoryQueue) -> None:
        """Worker loop: drain the queue in order until shutdown or a fatal error."""
        while not self._stop_event.is_set():
            event = worker_queue.consume_message()
            if event is None:
                if worker_queue.is_shutdown() and worker_queue.is_empty():
                    break
                continue

            try:
                self._apply(event)
            except Exception as e:
                self._record_error(e)

    def _record_error(self, error: BaseException) -> None:
        logger.critical(f"Fatal error, stopping processing: {error}")
        with self._errors_lock:
            self._errors.append(error)
        self._stop_event.set()

    def _apply(self, event: Event) -> None:
        result = self._processor.process_event(event)
        if result == ProcessingResult.SUCCESS:
            self._stats.record_success()
        else:
            self._stats.record_rejection()

    def _parse_rows(self, rows: Iterable[Dict]) -> Iterable[Event]:
        for row in rows:
            event = parse_csv_row(row)
            if event is None:
                self._stats.record_malformed()
                continue
            yield event
