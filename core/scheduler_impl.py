import hashlib
import logging
import math
import threading

from core.errors import MissingKeyError
from core.scheduler import Scheduler, Server

logger = logging.getLogger(__name__)


class RoundRobinScheduler(Scheduler):
    def __init__(self, servers: list[Server]):
        super().__init__(servers)
        self._cursor = 0
        self._lock = threading.Lock()

    def select(self, request_key: str | None = None) -> Server:
        with self._lock:
            self._check_pool()
            n = len(self._servers)
            server = self._servers[self._cursor % n]
            self._cursor = (self._cursor + 1) % n
            return server


class WeightedRoundRobinScheduler(Scheduler):
    """Smooth weighted round robin.

    Walks the pool with a cursor and a falling weight threshold. Each time the
    cursor wraps, the threshold drops by the GCD of all weights and is reset to
    the max weight once it reaches zero. A server is picked when its weight is
    at least the current threshold, so heavier servers are interleaved with
    lighter ones instead of being served in weight-sized bursts.
    """

    def __init__(self, servers: list[Server]):
        super().__init__(servers)
        weights = [s.weight for s in servers]
        self._gcd = math.gcd(*weights)
        self._max_weight = max(weights)
        # first advance lands on index 0
        self._cursor = len(servers) - 1
        self._current_weight = 0
        self._lock = threading.Lock()
        if self._max_weight == 0:
            logger.warning(
                f"All {len(servers)} servers have weight 0, "
                f"falling back to {servers[0].address}"
            )

    def select(self, request_key: str | None = None) -> Server:
        with self._lock:
            self._check_pool()
            n = len(self._servers)
            if n == 1 or self._max_weight == 0:
                return self._servers[0]
            while True:
                self._cursor = (self._cursor + 1) % n
                if self._cursor == 0:
                    self._current_weight -= self._gcd
                    if self._current_weight <= 0:
                        self._current_weight = self._max_weight
                server = self._servers[self._cursor]
                if server.weight >= self._current_weight:
                    return server


class LeastConnectionsScheduler(Scheduler):
    def select(self, request_key: str | None = None) -> Server:
        self._check_pool()
        # min() keeps the first of equal keys
        return min(self._servers, key=lambda s: s.snapshot()[0])


class LeastResponseTimeScheduler(Scheduler):
    def select(self, request_key: str | None = None) -> Server:
        self._check_pool()
        return min(self._servers, key=lambda s: s.snapshot()[1])


class IPHashScheduler(Scheduler):
    """Maps a client key to a fixed pool position via md5.

    Any string, including "", is a key; only a missing key (None) is rejected.
    """

    @staticmethod
    def hash_key(key: str) -> int:
        return int(hashlib.md5(key.encode()).hexdigest(), 16)

    def select(self, request_key: str | None = None) -> Server:
        if request_key is None:
            raise MissingKeyError("ip hash scheduling needs a client key")
        self._check_pool()
        return self._servers[self.hash_key(request_key) % len(self._servers)]


SCHEDULERS = (
    "round_robin",
    "weighted",
    "least_conn",
    "least_response_time",
    "ip_hash",
)


def new_scheduler(algo: str, servers: list[Server]) -> Scheduler:
    match algo:
        case "round_robin":
            return RoundRobinScheduler(servers)
        case "weighted" | "weighted_round_robin":
            return WeightedRoundRobinScheduler(servers)
        case "least_conn":
            return LeastConnectionsScheduler(servers)
        case "least_response_time":
            return LeastResponseTimeScheduler(servers)
        case "ip_hash" | "source_hash":
            return IPHashScheduler(servers)
        case _:
            raise ValueError(f"unknown scheduling algo: {algo}")
