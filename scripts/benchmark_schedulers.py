#!/usr/bin/env python3
"""Benchmark scheduler implementations and show how they spread requests."""

import argparse
import logging
import os
import sys
import time
import random
from collections import Counter

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core import SCHEDULERS, Server, new_scheduler
from server_pool import ServerPool

logger = logging.getLogger(__name__)


def setup_logging(log_level: str, log_file: str | None):
    level = getattr(logging, log_level.upper())
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=handlers,
    )


def make_servers(n_servers: int) -> list[Server]:
    servers = [
        Server(f"10.0.{i // 250}.{i % 250 + 1}:8080", weight=i % 5 + 1)
        for i in range(n_servers)
    ]
    for s in servers:
        s.set_connections(random.randint(0, 10))
        s.set_response_time(round(random.uniform(5.0, 120.0), 1))
    return servers


def benchmark(algo: str, servers: list[Server], num_requests: int) -> tuple[float, Counter]:
    """Time num_requests selections, returning elapsed seconds and pick counts."""
    scheduler = new_scheduler(algo, servers)
    keys = [f"172.16.{i % 256}.{i * 7 % 256}" for i in range(1024)]
    counts = Counter()
    start = time.perf_counter()
    for i in range(num_requests):
        counts[scheduler.select(keys[i % len(keys)]).address] += 1
    elapsed = time.perf_counter() - start
    return elapsed, counts


def run_benchmarks(num_requests: int, backend_counts: list[int]):
    """Run all benchmarks."""
    print(f"=== Scheduler Benchmark ({num_requests:,} requests) ===\n")

    for n_servers in backend_counts:
        servers = make_servers(n_servers)
        print(f"{n_servers} servers:")
        for algo in SCHEDULERS:
            elapsed, counts = benchmark(algo, servers, num_requests)
            top_address, top_count = counts.most_common(1)[0]
            print(
                f"  {algo:<20} {elapsed:>7.4f}s   ({num_requests / elapsed:>12,.0f} ops/s)"
                f"   busiest {top_address} {top_count / num_requests:>6.1%}"
            )
        print()


def run_sample():
    """Replay the classic three-server walkthrough."""
    print("=== Sample walkthrough ===\n")
    servers = [
        Server("192.168.1.1", 1),
        Server("192.168.1.2", 2),
        Server("192.168.1.3", 3),
    ]
    pool = ServerPool(servers)

    print("Round Robin:")
    for _ in range(6):
        print(f"  {pool.select().address}")

    pool.set_scheduler("weighted")
    print("Weighted Round Robin:")
    for _ in range(6):
        print(f"  {pool.select().address}")

    pool.set_scheduler("least_conn")
    for address, n in zip([s.address for s in servers], [5, 2, 3]):
        pool.set_connections(address, n)
    print(f"Least Connections:\n  {pool.select().address}")

    pool.set_scheduler("least_response_time")
    for address, ms in zip([s.address for s in servers], [50.0, 30.0, 40.0]):
        pool.set_response_time(address, ms)
    print(f"Least Response Time:\n  {pool.select().address}")

    pool.set_scheduler("ip_hash")
    print("IP Hash:")
    for client_ip in ["10.0.0.1", "10.0.0.2", "10.0.0.3"]:
        print(f"  {client_ip} -> {pool.select(client_ip).address}")
    print()


def main():
    parser = argparse.ArgumentParser(description="Benchmark scheduler implementations")
    parser.add_argument(
        "--requests",
        type=int,
        default=100000,
        help="Number of requests to benchmark (default: 100000)",
    )
    parser.add_argument(
        "--backend-counts",
        type=str,
        default="3,10,50",
        help="Comma-separated list of server counts to test (default: 3,10,50)",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Also replay the three-server sample walkthrough",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument(
        "--log-file", default=None, help="Optional file path for logging"
    )
    args = parser.parse_args()

    setup_logging(args.log_level, args.log_file)
    backend_counts = [int(x.strip()) for x in args.backend_counts.split(",")]
    if args.sample:
        run_sample()
    logger.info(f"Benchmarking {len(SCHEDULERS)} schedulers")
    run_benchmarks(args.requests, backend_counts)


if __name__ == "__main__":
    main()
