""" The :class:`Client` is the single point of contact between a subsystem
    and the bus. It owns all of the session state: the identity assigned by
    the bus, the subscription set, the handler table, the allow-list of
    remote senders, and the queue of outbound packets.

    A typical subsystem looks something like::

        client = partyline.Client(partyline.config.get('orders'))
        client.on('order', handle_order)
        client.add_listening_context('app.orders')
        client.run()
"""

import functools
import logging
import os
import queue
import signal
import threading

from . import config
from . import context
from . import discovery
from . import dispatch
from . import fingerprint
from . import packet as packets
from .sendqueue import SendQueue
from .timer import Timer
from .transport import StreamTransport
from .errors import FramingError

logger = logging.getLogger(__name__)


class Identity:
    """ The identity assigned to this subsystem by the bus. Both fields are
        empty until the bus sends a ``youAre`` packet; the identity can only
        be bound once per session.
    """

    def __init__(self):
        self.worker_id = ''
        self.bus_id = ''


    def __repr__(self):
        return 'Identity(worker_id=%r, bus_id=%r)' % (self.worker_id, self.bus_id)


    @property
    def bound(self):
        return self.worker_id != ''


    def bind(self, worker_id, bus_id):
        """ Record the identity assigned by the bus. Returns False, and leaves
            the existing identity in place, if an identity is already bound.
        """

        if self.bound:
            logger.warning("identity already bound to %r, ignoring reassignment to %r", self.worker_id, worker_id)
            return False

        if worker_id is None:
            worker_id = ''

        if bus_id is None:
            bus_id = ''

        self.worker_id = str(worker_id)
        self.bus_id = str(bus_id)

        logger.info("bus %r assigned worker id %r", self.bus_id, self.worker_id)
        return True


# end of class Identity



class Client:
    """ A subsystem's connection to the bus. The *configuration* is either a
        :class:`partyline.config.Configuration` instance or a dictionary
        suitable for constructing one; the *transport* defaults to the
        standard input and output of this process.

        Inbound packets are read by a background thread, but all processing
        happens on whichever thread calls :func:`run` (or :func:`step`): one
        packet, or timer expiration, at a time.

        :ivar timeout: Seconds to wait for an answer in :func:`request_service`.
        :ivar discovery_timeout: Seconds to wait for the bus to list the
            services for :func:`request_service`; None waits indefinitely.
    """

    timeout = 1.0
    discovery_timeout = None

    def __init__(self, configuration=None, transport=None):

        if configuration is None:
            configuration = config.Configuration()
        elif isinstance(configuration, dict):
            configuration = config.Configuration(configuration)

        if transport is None:
            transport = StreamTransport()

        self.configuration = configuration
        self.transport = transport

        self.identity = Identity()
        self.subscriptions = context.Subscriptions(self._announce)
        self.dispatcher = dispatch.Dispatcher(self)
        self.fingerprint = fingerprint.Fingerprint(configuration, self.identity)
        self.send_queue = SendQueue(self._emit)

        self.events = queue.SimpleQueue()
        self.reader = None
        self.shutdown = False
        self.closed = False


    @property
    def name(self):
        return self.configuration.name


    @property
    def listen_context(self):
        return list(self.subscriptions)


    @property
    def worker_id(self):
        return self.identity.worker_id


    @property
    def bus_id(self):
        return self.identity.bus_id


    def on(self, packet_type, callback):
        """ Invoke *callback* with every accepted packet of *packet_type*.
            More than one callback can be attached to the same packet type;
            use :data:`partyline.fields.WILDCARD` to receive all packets.
        """

        return self.dispatcher.register(packet_type, callback)


    def once(self, packet_type, callback):
        """ Same as :func:`on`, but the callback is invoked at most once.
        """

        return self.dispatcher.register(packet_type, callback, once=True)


    def add_listening_context(self, new_context):
        """ Subscribe to a context prefix, and announce the full set of
            subscriptions to the bus.
        """

        self.subscriptions.add(new_context)


    def remove_listening_context(self, old_context):
        """ Unsubscribe from a context prefix, and announce the remaining
            subscriptions to the bus.
        """

        self.subscriptions.remove(old_context)


    def matches(self, candidate):
        return self.subscriptions.matches(candidate, self.identity.worker_id)


    def accept(self, packet):
        """ Screen and dispatch a single inbound packet. Packets sent by the
            handlers are emitted together once every handler has run, most
            recently sent first.
        """

        with self.send_queue.hold():
            return self.dispatcher.accept(packet)


    def send(self, packet):
        """ Send a packet to the bus. The packet is stamped with a timestamp
            and fingerprint when it is emitted; it should not be modified
            after it is handed to this method.
        """

        self.send_queue.send(packet)


    def query_service(self, service_context, callback):
        """ Ask the bus for the services listening on *service_context*. The
            *callback* will be invoked with the list of services.
        """

        return discovery.query_service(self, service_context, callback)


    def request_service(self, request, callback):
        """ Broadcast the *request* packet to every service listening on its
            context, and invoke *callback* exactly once: with the first
            response received, or with False if every service declines or
            nobody answers within :attr:`timeout` seconds. The returned
            :class:`partyline.discovery.PendingRequest` can be inspected
            but need not be retained.
        """

        return discovery.request_service(self, request, callback)


    def respond(self, request, **payload):
        """ Answer a request received from another subsystem.
        """

        response = packets.response(request, **payload)
        response['from'] = self.identity.worker_id
        self.send(response)


    def decline(self, request):
        """ Decline to answer a request received from another subsystem.
        """

        response = packets.no_response(request)
        response['from'] = self.identity.worker_id
        self.send(response)


    def start(self):
        """ Begin reading inbound packets, and ask the bus for an identity.
        """

        if self.reader is not None:
            return

        self.reader = threading.Thread(target=self._read)
        self.reader.daemon = True
        self.reader.start()

        self.send(packets.who_am_i())


    def schedule(self, event):
        """ Arrange for the callable *event* to be invoked on the processing
            thread. Scheduling None ends the session.
        """

        self.events.put(event)


    def call_later(self, delay, callback):
        """ Invoke *callback* on the processing thread after *delay* seconds.
            The returned :class:`partyline.timer.Timer` can be cancelled.
        """

        timer = Timer(delay, callback, self.schedule)
        return timer.start()


    def step(self, timeout=None):
        """ Process a single event: an inbound packet, or an expired timer.
            Returns False if no event arrived within *timeout* seconds.
        """

        try:
            event = self.events.get(timeout=timeout)
        except queue.Empty:
            return False

        if event is None:
            self.shutdown = True
            return True

        try:
            with self.send_queue.hold():
                event()
        except Exception:
            logger.exception("failed to process event %r", event)

        return True


    def run(self):
        """ Process events until the inbound stream ends, then close the
            session. This is the main loop for a subsystem.
        """

        self.start()

        try:
            while self.shutdown == False:
                self.step(timeout=1)
        except Exception:
            logger.exception("unhandled failure in the processing loop")
        finally:
            self.terminate()


    def terminate(self, exit_level=0, interrupt=True):
        """ Close the session: tell the bus we are leaving, and signal this
            process to interrupt itself if *interrupt* is True.
        """

        if self.closed == True:
            return

        self.closed = True
        self.shutdown = True

        self.send(packets.close(exit_level))
        logger.info("session closed for %r", self.name)

        self.transport.close()

        if interrupt == True:
            os.kill(os.getpid(), signal.SIGINT)


    def _announce(self, contexts):
        self.send(packets.set_listen_context(contexts))


    def _emit(self, packet):
        self.fingerprint.stamp(packet)
        logger.debug("emitting %r", packet.get('type'))
        self.transport.send(packet)


    def _read(self):
        """ Background thread reading the transport, queueing each decoded
            packet for the processing thread.
        """

        try:
            for unit in self.transport:
                try:
                    value = self.transport.decode(unit)
                except FramingError as e:
                    logger.warning("framing error: %s", e)
                    self.schedule(functools.partial(self._report, str(e)))
                    continue

                self.schedule(functools.partial(self.accept, value))
        except Exception:
            logger.exception("failed to read from the bus")

        self.schedule(None)


    def _report(self, error):
        self.send(packets.error(error))


# end of class Client


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
