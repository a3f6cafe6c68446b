"""
Event management system for discrete event simulation.

This module implements a priority queue-based event system for
chronological processing of disease transitions, trips between places,
daily schedule ticks, statistics reports and the end of simulated time.

Events live in a dense arena owned by the EventManager.  Callers only ever
receive an EventHandle (slot index + generation), which is enough to cancel
or reschedule a pending event but not to read or modify it.  Cancelling frees
the slot and bumps its generation, so stale handles silently stop matching.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, List, Callable, Dict, Tuple
import heapq
import logging
import math

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Simulation event types."""
    PERSON_TRANSITION = "person_transition"
    PERSON_TRAVEL = "person_travel"
    SCHEDULE_TICK = "schedule_tick"
    DAILY_REPORT = "daily_report"
    END_OF_TIME = "end_of_time"


class Transition(Enum):
    """Disease state transitions a person can be scheduled to undergo."""
    INFECT = "infect"
    BECOME_CONTAGIOUS = "become_contagious"
    FEEL_SICK = "feel_sick"
    GO_TO_BED = "go_to_bed"
    RECOVER = "recover"
    DIE = "die"


@dataclass(frozen=True)
class EventHandle:
    """Opaque reference to a scheduled event, used only to cancel or reschedule it."""
    index: int
    generation: int


@dataclass
class Event:
    """Simulation event."""

    time: float
    sequence: int
    event_type: EventType
    data: Any = None
    handle: Optional[EventHandle] = None
    processed: bool = False

    def __str__(self) -> str:
        return f"Event({self.event_type.value} at {self.time:.1f})"


@dataclass
class PersonTransition:
    """Data for disease state transition events."""
    person: Any
    transition: Transition


@dataclass
class PersonTravel:
    """Data for travel events (currently only trips home)."""
    person: Any
    place: Any = None  # None means the person's home


@dataclass
class ScheduleTick:
    """Data for the daily tick of a schedule binding a person to a place."""
    schedule: Any
    person: Any
    place: Any


# heap entries are (time, sequence, slot index, slot generation)
_HeapEntry = Tuple[float, int, int, int]


class EventManager:
    """
    Manages simulation events with a cancellable priority queue.

    Features:
    - Time-ordered event processing, FIFO among equal times
    - Cancellation and rescheduling through opaque handles
    - Handler dispatch by event type
    - Optional event history
    """

    # rebuild the heap once stale entries outnumber live ones past this size
    COMPACTION_THRESHOLD = 1024

    def __init__(self, keep_history: bool = False):
        self._heap: List[_HeapEntry] = []
        self._slots: List[Optional[Event]] = []
        self._generations: List[int] = []
        self._free_slots: List[int] = []
        self._live = 0
        self._next_sequence = 0

        self._event_handlers: Dict[EventType, List[Callable]] = {}
        self._keep_history = keep_history
        self._event_history: List[Event] = []
        self._current_time: float = 0.0
        self._stopped = False

        # Statistics
        self._events_processed = 0
        self._events_cancelled = 0
        self._events_rescheduled = 0
        self._events_by_type: Dict[EventType, int] = {et: 0 for et in EventType}

    # ------------------------------------------------------------------
    # scheduling

    def schedule(
        self,
        time: float,
        event_type: EventType,
        data: Any = None
    ) -> EventHandle:
        """
        Schedule an event.

        There is no requirement that ``time`` be at or after the current
        clock; setup code schedules everything at time 0.0.

        Args:
            time: Simulated time (seconds) at which the event fires
            event_type: Kind of event, selects the handlers
            data: Event payload passed to the handlers

        Returns:
            Handle that can later be used to cancel or reschedule the event
        """
        if math.isnan(time):
            raise ValueError(f"cannot schedule {event_type.value} at NaN time")

        if self._free_slots:
            index = self._free_slots.pop()
        else:
            index = len(self._slots)
            self._slots.append(None)
            self._generations.append(0)

        handle = EventHandle(index, self._generations[index])
        event = Event(
            time=time,
            sequence=self._take_sequence(),
            event_type=event_type,
            data=data,
            handle=handle
        )
        self._slots[index] = event
        self._live += 1
        heapq.heappush(self._heap, (time, event.sequence, index, handle.generation))
        return handle

    def cancel(self, handle: Optional[EventHandle]) -> None:
        """
        Cancel a previously scheduled event.

        Nothing happens if the event already fired, was already cancelled,
        or never existed.
        """
        event = self._lookup(handle)
        if event is None:
            return
        self._release(handle.index)
        self._events_cancelled += 1
        self._maybe_compact()

    def reschedule(self, handle: Optional[EventHandle], time: float) -> None:
        """
        Move a pending event to a new time.

        The event keeps its handle and payload; it sorts as if it had just
        been scheduled at the new time.  Nothing happens if the event is no
        longer pending.
        """
        event = self._lookup(handle)
        if event is None:
            return
        if math.isnan(time):
            raise ValueError(f"cannot reschedule {event.event_type.value} to NaN time")
        event.time = time
        event.sequence = self._take_sequence()
        heapq.heappush(self._heap, (time, event.sequence, handle.index, handle.generation))
        self._events_rescheduled += 1
        self._maybe_compact()

    def is_pending(self, handle: Optional[EventHandle]) -> bool:
        """Check whether a handle still refers to an unfired, uncancelled event."""
        return self._lookup(handle) is not None

    def time_of(self, handle: Optional[EventHandle]) -> Optional[float]:
        """Get the fire time of a pending event, or None if it is not pending."""
        event = self._lookup(handle)
        return None if event is None else event.time

    # ------------------------------------------------------------------
    # queue access

    def pop_next_event(self) -> Optional[Event]:
        """Get and remove next event from queue."""
        entry = self._pop_valid_entry()
        if entry is None:
            return None
        index = entry[2]
        event = self._slots[index]
        self._release(index)
        self._current_time = event.time
        return event

    def peek_next_event(self) -> Optional[Event]:
        """Look at next event without removing it."""
        while self._heap:
            time, sequence, index, generation = self._heap[0]
            event = self._slots[index]
            if (self._generations[index] == generation and event is not None
                    and event.sequence == sequence):
                return event
            heapq.heappop(self._heap)
        return None

    def is_empty(self) -> bool:
        """Check if event queue is empty."""
        return self._live == 0

    def size(self) -> int:
        """Get number of pending events."""
        return self._live

    def clear_queue(self) -> None:
        """Drop all pending events; their handles become stale."""
        for index, event in enumerate(self._slots):
            if event is not None:
                self._release(index)
        self._heap.clear()

    def get_events_by_type(self, event_type: EventType) -> List[Event]:
        """Get all pending events of a specific type, in firing order."""
        pending = [e for e in self._slots if e is not None and e.event_type == event_type]
        return sorted(pending, key=lambda e: (e.time, e.sequence))

    # ------------------------------------------------------------------
    # dispatch

    def register_handler(self, event_type: EventType, handler: Callable) -> None:
        """
        Register an event handler function.

        Handler signature: handler(event: Event) -> Any
        """
        if event_type not in self._event_handlers:
            self._event_handlers[event_type] = []
        self._event_handlers[event_type].append(handler)

    def process_event(self, event: Event) -> Any:
        """Process an event by calling registered handlers."""
        if event.processed:
            return None

        results = []
        handlers = self._event_handlers.get(event.event_type, [])
        if not handlers:
            logger.warning(f"No handler registered for {event}")
        for handler in handlers:
            try:
                results.append(handler(event))
            except Exception as e:
                logger.error(f"Error processing event {event}: {e}")
                raise

        event.processed = True
        self._events_processed += 1
        self._events_by_type[event.event_type] += 1
        if self._keep_history:
            self._event_history.append(event)

        return results[0] if len(results) == 1 else results

    def process_next_event(self) -> Optional[Any]:
        """Pop and process next event."""
        event = self.pop_next_event()
        if event is None:
            return None
        return self.process_event(event)

    def run(self, max_events: Optional[int] = None) -> int:
        """
        Process events in time order until the queue is empty, an action
        calls stop(), or max_events have been processed.

        Returns:
            Number of events processed by this call
        """
        self._stopped = False
        count = 0
        while not self._stopped and not self.is_empty():
            if max_events is not None and count >= max_events:
                break
            self.process_next_event()
            count += 1
        return count

    def process_until(self, end_time: float) -> int:
        """Process events with time <= end_time."""
        self._stopped = False
        count = 0
        while not self._stopped:
            next_event = self.peek_next_event()
            if next_event is None or next_event.time > end_time:
                break
            self.process_next_event()
            count += 1
        return count

    def stop(self) -> None:
        """Make the running loop return after the current event."""
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    # ------------------------------------------------------------------
    # reporting

    def get_statistics(self) -> Dict[str, Any]:
        """Get event processing statistics."""
        return {
            'events_processed': self._events_processed,
            'events_queued': self._live,
            'events_cancelled': self._events_cancelled,
            'events_rescheduled': self._events_rescheduled,
            'events_by_type': dict(self._events_by_type),
            'current_time': self._current_time,
            'heap_size': len(self._heap),
            'history_size': len(self._event_history)
        }

    @property
    def history(self) -> List[Event]:
        """Processed events, oldest first (empty unless keep_history)."""
        return list(self._event_history)

    @property
    def current_time(self) -> float:
        """Time of the most recently popped event."""
        return self._current_time

    @property
    def events_processed(self) -> int:
        return self._events_processed

    def __len__(self) -> int:
        return self._live

    def __str__(self) -> str:
        return f"EventManager({self._live} events queued, {self._events_processed} processed)"

    # ------------------------------------------------------------------
    # arena internals

    def _take_sequence(self) -> int:
        sequence = self._next_sequence
        self._next_sequence += 1
        return sequence

    def _lookup(self, handle: Optional[EventHandle]) -> Optional[Event]:
        if handle is None or not 0 <= handle.index < len(self._slots):
            return None
        if self._generations[handle.index] != handle.generation:
            return None
        return self._slots[handle.index]

    def _release(self, index: int) -> None:
        self._slots[index] = None
        self._generations[index] += 1
        self._free_slots.append(index)
        self._live -= 1

    def _pop_valid_entry(self) -> Optional[_HeapEntry]:
        while self._heap:
            entry = heapq.heappop(self._heap)
            time, sequence, index, generation = entry
            event = self._slots[index]
            if (self._generations[index] == generation and event is not None
                    and event.sequence == sequence):
                return entry
        return None

    def _maybe_compact(self) -> None:
        stale = len(self._heap) - self._live
        if len(self._heap) < self.COMPACTION_THRESHOLD or stale <= self._live:
            return
        self._heap = [
            (event.time, event.sequence, index, self._generations[index])
            for index, event in enumerate(self._slots)
            if event is not None
        ]
        heapq.heapify(self._heap)
        logger.debug(f"Compacted event heap: dropped {stale} stale entries")
