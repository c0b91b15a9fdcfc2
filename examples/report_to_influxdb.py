"""Example worker reporting its metrics to a local time-series store.

Run with:
    python examples/report_to_influxdb.py [--url http://localhost:8086] [--db metrics]

Reported measurements (every 5 seconds, tagged with host and service):
    worker.jobs.processed   - counter of finished jobs
    worker.jobs.failed      - counter of failed jobs
    worker.queue.depth      - gauge of pending jobs
    worker.job.duration     - timer of job durations in milliseconds
    worker.job.size         - histogram of job payload sizes

Create the database first, e.g. ``influx -execute 'CREATE DATABASE metrics'``.
Set LOG_LEVEL=DEBUG to see every payload as it is sent.
"""

import argparse
import logging
import os
import random
import socket
import time
from collections import deque

from influxline import (
    GlobFilter,
    HttpWriter,
    LineProtocolReporter,
    MetricRegistry,
    ReporterConfig,
    ScheduledReporter,
    TimeUnit,
)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--url", default="http://localhost:8086")
    parser.add_argument("--db", default="metrics")
    parser.add_argument("--period", type=float, default=5.0)
    args = parser.parse_args()

    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    registry = MetricRegistry()
    queue: deque[int] = deque(random.randint(1, 4096) for _ in range(100))
    registry.gauge("worker.queue.depth", lambda: len(queue))
    processed = registry.counter("worker.jobs.processed")
    failed = registry.counter("worker.jobs.failed")
    durations = registry.timer("worker.job.duration")
    sizes = registry.histogram("worker.job.size")

    config = ReporterConfig(
        database=args.db,
        duration_unit=TimeUnit.MILLISECONDS,
        tags={"host": socket.gethostname(), "service": "example-worker"},
        filter=GlobFilter(include=["worker.*"]),
    )

    with HttpWriter(args.url) as writer:
        reporter = LineProtocolReporter(writer, config, source=registry)
        with ScheduledReporter(reporter, period=args.period, report_on_stop=True):
            try:
                while True:
                    if not queue:
                        queue.extend(random.randint(1, 4096) for _ in range(100))
                    size = queue.popleft()
                    sizes.update(size)
                    with durations.time():
                        time.sleep(size / 100_000)
                    if random.random() < 0.05:
                        failed.inc()
                    else:
                        processed.inc()
            except KeyboardInterrupt:
                pass


if __name__ == "__main__":
    main()
