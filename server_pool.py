import logging
import threading
from core import (
    Server,
    Scheduler,
    InvalidPoolError,
    new_scheduler,
)

logger = logging.getLogger(__name__)


class ServerPool:
    def __init__(self, servers: list[Server], algorithm: str = "round_robin") -> None:
        if not servers:
            raise InvalidPoolError("server pool needs at least one server")
        self._servers: list[Server] = list(servers)
        self._algorithm = algorithm
        self._lock = threading.Lock()
        self.scheduler: Scheduler = new_scheduler(algorithm, self._servers)

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def servers(self) -> list[Server]:
        with self._lock:
            return list(self._servers)

    def _rebuild_scheduler(self, servers: list[Server]):
        # schedulers keep a reference to the list, so never mutate it in place
        self.scheduler = new_scheduler(self._algorithm, servers)
        self._servers = servers

    def _get(self, address: str) -> Server:
        for server in self._servers:
            if server.address == address:
                return server
        raise KeyError(address)

    def set_scheduler(self, algo: str):
        with self._lock:
            self.scheduler = new_scheduler(algo, self._servers)
            self._algorithm = algo
        logger.info(f"Scheduler algorithm changed to: {algo}")

    def add(self, address: str, weight: int = 1) -> Server:
        server = Server(address, weight=weight)
        with self._lock:
            if any(s.address == address for s in self._servers):
                raise ValueError(f"server already in pool: {address}")
            servers = self._servers + [server]
            self._rebuild_scheduler(servers)
        logger.info(f"Server added: {address} (weight={weight})")
        return server

    def remove(self, address: str):
        with self._lock:
            servers = [s for s in self._servers if s.address != address]
            if len(servers) == len(self._servers):
                raise KeyError(address)
            if not servers:
                raise InvalidPoolError(f"cannot remove {address}, pool would be empty")
            self._rebuild_scheduler(servers)
        logger.info(f"Server removed: {address}")

    def select(self, request_key: str | None = None) -> Server:
        with self._lock:
            scheduler = self.scheduler
        server = scheduler.select(request_key)
        logger.debug(f"Selected {server.address} via {self._algorithm}")
        return server

    def acquire(self, request_key: str | None = None) -> Server:
        server = self.select(request_key)
        active = server.acquire()
        logger.debug(f"Dispatched to {server.address} ({active} active)")
        return server

    def release(self, server: Server, response_time: float | None = None):
        active = server.release(response_time)
        logger.debug(f"Released {server.address} ({active} active)")

    def set_connections(self, address: str, n: int):
        with self._lock:
            server = self._get(address)
        server.set_connections(n)

    def set_response_time(self, address: str, response_time: float):
        with self._lock:
            server = self._get(address)
        server.set_response_time(response_time)

    def show(self) -> dict:
        with self._lock:
            servers = list(self._servers)
        result = {}
        for s in servers:
            connections, response_time = s.snapshot()
            result[s.address] = {
                "weight": s.weight,
                "active_connections": connections,
                "last_response_time": response_time,
            }
        return result
