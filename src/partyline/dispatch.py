""" Routing of inbound packets to the handlers registered by the subsystem.
    Inbound packets are screened against the subscription set and, when the
    configuration requires it, the sender's fingerprint; the survivors are
    handed to every handler registered for the packet type, and to every
    handler registered for all packet types.
"""

import logging

from . import fields

logger = logging.getLogger(__name__)


class Registration:
    """ A single callback registered for a single packet type. A *once*
        registration is cancelled the first time it is invoked; a cancelled
        registration is never invoked again, and is removed from the handler
        table of its dispatcher.
    """

    def __init__(self, packet_type, callback, once=False, dispatcher=None):

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        self.packet_type = packet_type
        self.callback = callback
        self.once = once
        self.active = True
        self.dispatcher = dispatcher


    def __repr__(self):
        return '<Registration %s %r>' % (self.packet_type, self.callback)


    def __call__(self, packet):

        if self.active == False:
            return

        if self.once == True:
            self.cancel()

        self.callback(packet)


    def cancel(self):
        """ Deactivate this registration, and remove it from the handler
            table it belongs to, if any.
        """

        self.active = False

        if self.dispatcher is not None:
            self.dispatcher._prune(self.packet_type)


# end of class Registration



class Dispatcher:
    """ The handler table for a :class:`partyline.client.Client`. Handlers
        are kept in a dictionary keyed by packet type; handlers for every
        packet type are kept under :data:`partyline.fields.WILDCARD`.
    """

    def __init__(self, client):

        self.client = client
        self.handlers = dict()


    def register(self, packet_type, callback, once=False):
        """ Register a *callback* to be invoked with every accepted packet of
            the given *packet_type*. Multiple callbacks may be registered for
            the same type; they are invoked in registration order. The new
            :class:`Registration` is returned.
        """

        registration = Registration(packet_type, callback, once, self)

        try:
            registrations = self.handlers[packet_type]
        except KeyError:
            registrations = list()
            self.handlers[packet_type] = registrations

        registrations.append(registration)
        return registration


    def accept(self, packet):
        """ Screen an inbound packet, and dispatch it if it is acceptable.
            Returns True if the packet was dispatched.
        """

        if isinstance(packet, dict):
            pass
        else:
            logger.warning("framing error, inbound value is not a packet: %r", packet)
            return False

        client = self.client

        if packet.get('from') == fields.BUS:
            # The bus channel is trusted implicitly.
            if packet.get('type') == fields.YOU_ARE:
                client.identity.bind(packet.get('worker_id'), packet.get('bus_id'))

            self.dispatch(packet)
            return True

        context = packet.get('context')

        if client.subscriptions.matches(context, client.identity.worker_id):
            pass
        else:
            logger.warning("bus protocol violation, packet not addressed to this subsystem: %r", packet)
            return False

        if client.configuration.incoming_requires_secure == True:
            if client.fingerprint.verify(packet):
                pass
            else:
                logger.warning("security violation, fingerprint rejected for sender %r: %r", packet.get('from'), packet)
                return False

        self.dispatch(packet)
        return True


    def dispatch(self, packet):
        """ Invoke the handlers for this packet's type, followed by the
            wildcard handlers. A handler raising an exception does not
            prevent the remaining handlers from being invoked.
        """

        packet_type = packet.get('type')
        logger.debug("dispatching %r", packet_type)

        buckets = list()

        if packet_type != fields.WILDCARD:
            buckets.append(packet_type)

        buckets.append(fields.WILDCARD)

        for bucket in buckets:
            try:
                registrations = self.handlers[bucket]
            except (KeyError, TypeError):
                continue

            # Iterate over a copy; handlers are free to register additional
            # handlers while being invoked.

            for registration in tuple(registrations):
                try:
                    registration(packet)
                except Exception:
                    logger.exception("handler %r failed on packet: %r", registration.callback, packet)
                    continue


    def _prune(self, bucket):

        try:
            registrations = self.handlers[bucket]
        except KeyError:
            return

        remaining = [registration for registration in registrations if registration.active]

        if remaining:
            self.handlers[bucket] = remaining
        else:
            del self.handlers[bucket]


# end of class Dispatcher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
