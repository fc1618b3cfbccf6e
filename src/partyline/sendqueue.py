""" Serialization of outbound packets. Any number of callers, including
    handlers invoked while a packet is being emitted, may send at any time;
    the :class:`SendQueue` guarantees that exactly one of them is emitting
    to the transport at any given moment, and that nobody waits to do so.
"""

import contextlib
import logging
import threading

logger = logging.getLogger(__name__)


class SendQueue:
    """ Pending outbound packets, and the machinery to emit them one at a
        time via the *emit* callable.

        A caller that finds no drain in progress becomes the drain owner,
        and emits packets until the pending list is empty. A caller that
        finds a drain already in progress leaves its packet for the owner
        to pick up. The ownership flag is a lock that is only ever acquired
        without blocking; it is never contended by waiting.

        Packets are removed from the end of the pending list, so within a
        single drain the most recently enqueued packet is emitted first.
        Existing bus deployments have always seen this ordering. Set *lifo*
        to False for first-in, first-out emission.

        A caller can also take ownership ahead of time with :func:`hold`;
        everything sent while the hold is in place is emitted, most recent
        first, in a single drain when the hold is released.

        :ivar drains: The number of drains that have been started.
    """

    def __init__(self, emit, lifo=True):

        self.emit = emit
        self.lifo = lifo
        self.pending = list()
        self.drains = 0
        self._owner = threading.Lock()


    def __len__(self):
        return len(self.pending)


    @property
    def draining(self):
        return self._owner.locked()


    def enqueue(self, packet):
        """ Append a packet to the pending list and return immediately.
        """

        self.pending.append(packet)


    def drain(self):
        """ Emit all pending packets, unless another caller is already doing
            so; return True if this call owned the drain.
        """

        acquired = self._owner.acquire(blocking=False)

        if acquired == False:
            return False

        self.drains += 1

        try:
            while self.pending:
                if self.lifo == True:
                    packet = self.pending.pop()
                else:
                    packet = self.pending.pop(0)

                try:
                    self.emit(packet)
                except Exception:
                    logger.exception("failed to emit packet: %r", packet)
        finally:
            self._owner.release()

        return True


    @contextlib.contextmanager
    def hold(self):
        """ Own the drain for the duration of a with-block. Packets sent in
            the meantime are left pending, then all emitted in one drain when
            the block exits. If another caller already owns the drain, the
            hold has no effect, and the packets go to that owner instead.
        """

        acquired = self._owner.acquire(blocking=False)

        try:
            yield acquired
        finally:
            if acquired == True:
                self._owner.release()
                self.drain()


    def send(self, packet):
        """ Enqueue the *packet*, then drain the pending list if no other
            caller is doing so.
        """

        self.enqueue(packet)
        self.drain()


# end of class SendQueue


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
