"""Transport between a subsystem and the bus.

A transport delivers inbound units, each holding one JSON document, and
emits outbound packets as one compact JSON document per unit, in order.
The bus talks to its subsystems over their standard input and output, one
document per line.
"""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from typing import IO, Any, Iterator, Optional, TextIO, Union

from . import json
from .errors import FramingError


class Transport(ABC):
    """Minimal contract for a bus transport."""

    @abstractmethod
    def __iter__(self) -> Iterator[Union[bytes, str]]:
        """Yield raw inbound units until the input is exhausted."""

    @abstractmethod
    def send(self, packet: dict) -> None:
        """Emit a single packet."""

    def decode(self, unit: Union[bytes, str]) -> Any:
        """Decode an inbound unit into a JSON value. Byte units must hold
        UTF-8 text."""

        if isinstance(unit, bytes):
            try:
                unit = unit.decode("utf-8")
            except UnicodeDecodeError as e:
                raise FramingError("cannot decode %r: %s" % (unit, e))

        try:
            return json.loads(unit)
        except json.DecodeError as e:
            raise FramingError("cannot decode %r: %s" % (unit, e))

    def close(self) -> None:
        """Release any resources held by the transport."""


class StreamTransport(Transport):
    """Newline-delimited JSON over a pair of streams, by default the standard
    input and output of the process. The input is read as bytes where
    possible, so that a line of invalid UTF-8 is a framing error for that
    line alone rather than the end of the stream."""

    def __init__(self, input: Optional[IO] = None, output: Optional[TextIO] = None):
        if input is None:
            input = getattr(sys.stdin, "buffer", sys.stdin)

        self.input = input
        self.output = sys.stdout if output is None else output
        self.output_lock = threading.Lock()

    def __iter__(self) -> Iterator[Union[bytes, str]]:
        for line in self.input:
            line = line.strip()
            if line:
                yield line

    def send(self, packet: dict) -> None:
        encoded = json.dumps(packet).decode()

        with self.output_lock:
            self.output.write(encoded + "\n")
            self.output.flush()
