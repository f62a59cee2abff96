import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from core.errors import EmptyPoolError, InvalidPoolError


@dataclass
class Server:
    address: str
    weight: int = 1
    active_connections: int = 0
    last_response_time: float = 0.0  # ms
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        if self.weight < 0:
            raise ValueError(f"weight must be >= 0, got {self.weight}")
        if self.active_connections < 0:
            raise ValueError(
                f"active_connections must be >= 0, got {self.active_connections}"
            )
        if self.last_response_time < 0:
            raise ValueError(
                f"last_response_time must be >= 0, got {self.last_response_time}"
            )

    def __setattr__(self, name, value):
        # identity and capacity are fixed once set; schedulers cache weights
        if name in ("address", "weight") and name in self.__dict__:
            raise AttributeError(f"{name} is read-only")
        super().__setattr__(name, value)

    def snapshot(self) -> tuple[int, float]:
        """Return (active_connections, last_response_time) read under the lock."""
        with self._lock:
            return self.active_connections, self.last_response_time

    def set_connections(self, n: int):
        if n < 0:
            raise ValueError(f"connections must be >= 0, got {n}")
        with self._lock:
            self.active_connections = n

    def set_response_time(self, response_time: float):
        if response_time < 0:
            raise ValueError(f"response time must be >= 0, got {response_time}")
        with self._lock:
            self.last_response_time = response_time

    def acquire(self) -> int:
        with self._lock:
            self.active_connections += 1
            return self.active_connections

    def release(self, response_time: float | None = None) -> int:
        if response_time is not None and response_time < 0:
            raise ValueError(f"response time must be >= 0, got {response_time}")
        with self._lock:
            self.active_connections = max(self.active_connections - 1, 0)
            if response_time is not None:
                self.last_response_time = response_time
            return self.active_connections


class Scheduler(ABC):
    """Picks one server out of a fixed, ordered pool.

    The pool list is held by reference and must not be reordered while the
    scheduler is in use; build a new scheduler to change membership.
    """

    def __init__(self, servers: list[Server]):
        if not servers:
            raise InvalidPoolError("cannot build a scheduler over an empty pool")
        self._servers = servers

    @property
    def servers(self) -> list[Server]:
        return self._servers

    def _check_pool(self):
        if not self._servers:
            raise EmptyPoolError("no servers in pool")

    @abstractmethod
    def select(self, request_key: str | None = None) -> Server:
        pass

    def __iter__(self):
        while True:
            yield self.select()
