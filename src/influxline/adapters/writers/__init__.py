"""Writer adapters implementing WriterPort."""

from influxline.adapters.writers.http import HttpWriter
from influxline.adapters.writers.in_memory import InMemoryWriter, WriteRequest

__all__ = [
    "HttpWriter",
    "InMemoryWriter",
    "WriteRequest",
]
