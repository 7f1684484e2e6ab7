"""
Event logging for the queue engine.
Keeps an in-memory trace and optionally mirrors it to CSV.
"""

import csv
from pathlib import Path
from dataclasses import dataclass, asdict
from typing import List, Optional
import pandas as pd
import config


@dataclass
class Event:
    """Represents a single event in the queue system."""
    timestamp: float
    event_type: str  # "arrival", "service_start", "departure"
    customer_id: int
    queue_length: int
    service_time: Optional[float] = None


class EventLog:
    """Manages event logging to memory and, optionally, CSV."""

    def __init__(self, output_dir: Optional[str] = None, run_id: str = "default"):
        """Initialize event logger.

        Args:
            output_dir: Directory to store CSV logs, None for memory only
            run_id: Identifier for this run (used in filename)
        """
        self.run_id = run_id
        self.events: List[Event] = []
        self.csv_path: Optional[Path] = None

        if output_dir is not None:
            out = Path(output_dir)
            out.mkdir(parents=True, exist_ok=True)
            self.csv_path = out / f"events_{run_id}.csv"
            self._init_csv()

    def _init_csv(self):
        """Initialize CSV file with header."""
        with open(self.csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=config.EVENT_LOG_COLUMNS)
            writer.writeheader()

    def log_event(self, event: Event):
        """Log a single event to memory and CSV.

        Args:
            event: Event object to log
        """
        self.events.append(event)

        if self.csv_path is not None:
            with open(self.csv_path, "a", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=config.EVENT_LOG_COLUMNS)
                writer.writerow(asdict(event))

    def clear(self):
        """Forget in-memory events and truncate the CSV file."""
        self.events = []
        if self.csv_path is not None:
            self._init_csv()

    def get_dataframe(self) -> pd.DataFrame:
        """Return in-memory events as pandas DataFrame."""
        if not self.events:
            return pd.DataFrame(columns=config.EVENT_LOG_COLUMNS)

        return pd.DataFrame([asdict(e) for e in self.events])

    def get_events_by_type(self, event_type: str) -> List[Event]:
        """Get all events of one type."""
        return [e for e in self.events if e.event_type == event_type]

    def get_arrivals(self) -> List[Event]:
        """Get all arrival events."""
        return self.get_events_by_type("arrival")

    def get_departures(self) -> List[Event]:
        """Get all departure events."""
        return self.get_events_by_type("departure")
