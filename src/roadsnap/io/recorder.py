# roadsnap/io/recorder.py
import json
import logging
import sys
import threading
from dataclasses import asdict
from typing import Protocol

log = logging.getLogger("roadsnap.recorder")


class Sink(Protocol):
    def write(self, ev) -> None: ...


class JsonlSink:
    def __init__(self, fp=sys.stdout):
        self.fp = fp
        self._lock = threading.Lock()

    def write(self, ev) -> None:
        line = json.dumps(asdict(ev)) + "\n"
        with self._lock:
            self.fp.write(line)


class MemorySink:
    def __init__(self):
        self.events: list = []

    def write(self, ev) -> None:
        self.events.append(ev)


class Recorder:
    def __init__(self, *sinks: Sink):
        self.sinks = sinks or (JsonlSink(),)

    def emit(self, ev):
        for s in self.sinks:
            try:
                s.write(ev)
            except Exception:
                # a broken sink must not fail the query that produced the event
                log.exception("sink %s dropped %s", type(s).__name__, type(ev).__name__)
