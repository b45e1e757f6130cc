from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, List, Tuple, Type

Latitude  = float
Longitude = float
EPOCH_MILLIS = int

# Best-timestamp sentinels. UNSET marks a timestamp
# that has not been resolved yet, NO_TIMESTAMP one
# that was resolved but is not available.
UNSET: EPOCH_MILLIS = -2**63
NO_TIMESTAMP: EPOCH_MILLIS = -1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

class AisPacketError(Exception):
    """Base class of all errors raised by this package."""
    pass

def to_millis(date: datetime) -> EPOCH_MILLIS:
    """
    Milliseconds since the unix epoch.
    Naive datetimes are taken to be UTC.
    """
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return (date - _EPOCH) // timedelta(milliseconds=1)

def from_millis(millis: EPOCH_MILLIS) -> datetime:
    return _EPOCH + timedelta(milliseconds=millis)

@dataclass(frozen=True)
class Position:
    """
    Position object for a geographical point.
    """
    lat: Latitude
    lon: Longitude

    @property
    def as_list(self) -> List[float]:
        return [self.lat,self.lon]

@dataclass(frozen=True)
class PositionTime(Position):
    """
    Position paired with the time it was observed at.

    Parameters
    ----------
    lat : Latitude
        Latitude of the observation.
    lon : Longitude
        Longitude of the observation.
    time : EPOCH_MILLIS
        Milliseconds since the unix epoch,
        or -1 if the time is unknown.
    """
    time: EPOCH_MILLIS = NO_TIMESTAMP

    @classmethod
    def create(cls, position: Position, time: EPOCH_MILLIS) -> PositionTime:
        return cls(position.lat, position.lon, time)

    @property
    def position(self) -> Position:
        return Position(self.lat,self.lon)

class CellState(Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"

class Cell:
    """
    Lazily computed value.
    =====================

    A cell starts out PENDING. The first call to
    :meth:`compute` runs the supplied function and
    moves the cell to DONE (the return value is cached)
    or, if the function raised one of the `catch`
    exception types, to FAILED (the exception is cached
    and re-raised on every following call).

    Once DONE or FAILED, a cell never changes again
    and the function is never called a second time.

    Cells are not synchronized. Concurrent first calls
    may each run the function; callers sharing a packet
    between threads must warm it up beforehand.
    """
    __slots__ = ("state", "value", "error")

    def __init__(self) -> None:
        self.state = CellState.PENDING
        self.value: Any = None
        self.error: BaseException | None = None

    @classmethod
    def of(cls, value: Any) -> Cell:
        """Return a cell that is already computed."""
        cell = cls()
        cell.value = value
        cell.state = CellState.DONE
        return cell

    @property
    def pending(self) -> bool:
        return self.state is CellState.PENDING

    def compute(self,
                func: Callable[[], Any],
                catch: Tuple[Type[BaseException], ...] = ()) -> Any:
        if self.state is CellState.DONE:
            return self.value
        if self.state is CellState.FAILED:
            raise self.error
        try:
            value = func()
        except catch as err:
            self.error = err
            self.state = CellState.FAILED
            raise
        self.value = value
        self.state = CellState.DONE
        return value

    def __repr__(self) -> str:
        if self.state is CellState.DONE:
            return f"<Cell(done={self.value!r})>"
        if self.state is CellState.FAILED:
            return f"<Cell(failed={self.error!r})>"
        return "<Cell(pending)>"
