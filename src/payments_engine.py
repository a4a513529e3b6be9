import logging
from typing import Iterable, List, Optional

from csv_io import read_events
from models import AccountSnapshot, ProcessingResult, ProcessingStats
from registry import Event, LedgerRegistry

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Feeds an ordered event stream into a LedgerRegistry, one event at a time.
    Each event is fully applied before the next one is read.
    """

    def __init__(self, registry: Optional[LedgerRegistry] = None):
        self._registry = registry if registry is not None else LedgerRegistry()
        self._stats = ProcessingStats()

    @property
    def registry(self) -> LedgerRegistry:
        return self._registry

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> List[AccountSnapshot]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        with open(filepath, "r", newline="") as f:
            return self.process_events(read_events(f))

    def process_events(self, events: Iterable[Event]) -> List[AccountSnapshot]:
        for event in events:
            self.process_event(event)

        logger.info(f"Processing complete: {self._stats}")
        return self._registry.snapshot_all()

    def process_event(self, event: Event) -> ProcessingResult:
        result = self._registry.route(event)
        self._stats.record(result)
        return result
