""" Service discovery and request/response exchanges. A subsystem asks the
    bus which other subsystems listen on a given context (a SAP query); to
    make a request, it broadcasts the request to every listener and waits
    for the first of them to answer. Each listener either answers with a
    ``response`` packet or declines with a ``noResponse`` packet. If nobody
    answers in time, or everybody declines, the request resolves as False.
"""

import enum
import itertools
import logging
import threading

from . import fields
from . import packet as packets

logger = logging.getLogger(__name__)


class State(enum.Enum):
    INIT = 'init'
    AWAITING_SERVICE_LIST = 'awaiting service list'
    BROADCASTING = 'broadcasting'
    WAITING = 'waiting'
    RESOLVED_RESPONSE = 'resolved response'
    RESOLVED_NO_RESPONSE = 'resolved no response'
    CANCELLED = 'cancelled'


resolved_states = frozenset((State.RESOLVED_RESPONSE, State.RESOLVED_NO_RESPONSE))


class ServiceQuery:
    """ A single SAP query issued on behalf of a :class:`Client`. The
        *callback* is invoked with the list of services from the first
        ``serviceList`` packet that arrives for this query's *context*.
    """

    def __init__(self, client, context, callback):

        self.client = client
        self.context = context
        self.callback = callback
        self.registration = None


    def start(self):

        dispatcher = self.client.dispatcher
        self.registration = dispatcher.register(fields.SERVICE_LIST, self.receive)
        self.client.send(packets.sap_query(self.context))
        return self


    def receive(self, packet):

        # A service list that names its context can be matched with the
        # query that requested it; one that doesn't is taken at face value.

        try:
            context = packet['service_context']
        except KeyError:
            pass
        else:
            if context != self.context:
                return

        self.registration.cancel()

        services = packet.get('service_list')
        if services is None:
            services = list()

        self.callback(list(services))


    def cancel(self):
        """ Stop waiting for the service list. The callback will not be
            invoked.
        """

        if self.registration is not None:
            self.registration.cancel()


# end of class ServiceQuery



class PendingRequest:
    """ The state of a single request/response exchange. The *request* is
        an application packet, which must have a context; the *callback*
        is invoked exactly once, with either the first ``response`` packet
        received, or False.

        :ivar state: The current :class:`State` of the exchange.
        :ivar wait_list: The services expected to answer the request.
        :ivar declined: The services that have declined to answer.

        If the client has a :attr:`discovery_timeout`, the request also
        resolves as False when the bus has not listed the services within
        that many seconds.
    """

    def __init__(self, client, request, callback):

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        self.client = client
        self.request = request
        self.callback = callback

        self.state = State.INIT
        self.wait_list = list()
        self.declined = set()
        self.registrations = list()
        self.query = None
        self.timer = None
        self.discovery_timer = None
        self.resolved = False


    def __repr__(self):
        return '<PendingRequest %s %s>' % (self.request.get('request_id'), self.state.name)


    @property
    def done(self):
        return self.state in resolved_states


    @property
    def id(self):
        return self.request.get('request_id')


    def start(self):

        client = self.client
        request = self.request

        request['from'] = client.identity.worker_id
        if request.get('request_id') is None:
            request['request_id'] = _id_next()

        dispatcher = client.dispatcher
        self.registrations.append(dispatcher.register(fields.NO_RESPONSE, self.no_response))
        self.registrations.append(dispatcher.register(fields.RESPONSE, self.response))

        self.state = State.AWAITING_SERVICE_LIST
        self.query = client.query_service(request.get('context'), self.services)

        if client.discovery_timeout is not None:
            self.discovery_timer = client.call_later(client.discovery_timeout, self.unlisted)

        return self


    def services(self, service_list):
        """ The bus has enumerated the services listening on the request's
            context. Broadcast the request, and start the clock.
        """

        if self.state != State.AWAITING_SERVICE_LIST:
            return

        self.wait_list = list(service_list)

        if len(self.wait_list) == 0:
            logger.debug("no services listening on %r", self.request.get('context'))
            self.resolve(False)
            return

        if self.discovery_timer is not None:
            self.discovery_timer.cancel()

        self.state = State.BROADCASTING
        self.client.send(self.request)

        self.state = State.WAITING
        self.timer = self.client.call_later(self.client.timeout, self.expire)


    def no_response(self, packet):

        if self.state != State.WAITING or not self._concerns(packet):
            return

        sender = packet.get('from')

        if sender in self.wait_list:
            pass
        else:
            return

        self.declined.add(sender)

        for service in self.wait_list:
            if service not in self.declined:
                return

        self.resolve(False)


    def response(self, packet):

        if self.state != State.WAITING or not self._concerns(packet):
            return

        self.wait_list = list()
        self.resolve(packet)


    def expire(self):
        logger.debug("request %s timed out", self.id)
        self.resolve(False)


    def unlisted(self):

        if self.state != State.AWAITING_SERVICE_LIST:
            return

        logger.debug("no service list for request %s", self.id)
        self.resolve(False)


    def cancel(self):
        """ Abandon the exchange without invoking the callback. Has no
            effect on an exchange that has already concluded.
        """

        if self.resolved == True:
            return

        self.resolved = True
        self._release()
        self.state = State.CANCELLED


    def resolve(self, outcome):
        """ Conclude the exchange with the given *outcome*. Only the first
            resolution has any effect.
        """

        if self.resolved == True:
            return

        self.resolved = True
        self._release()

        if outcome is False:
            self.state = State.RESOLVED_NO_RESPONSE
        else:
            self.state = State.RESOLVED_RESPONSE

        self.callback(outcome)


    def _release(self):

        for timer in (self.timer, self.discovery_timer):
            if timer is not None:
                timer.cancel()

        if self.query is not None:
            self.query.cancel()

        for registration in self.registrations:
            registration.cancel()


    def _concerns(self, packet):

        # Responders are not required to echo the request id; a packet
        # without one is assumed to be for this request.

        try:
            request_id = packet['request_id']
        except KeyError:
            return True

        return request_id == self.id


# end of class PendingRequest



def query_service(client, context, callback):
    return ServiceQuery(client, context, callback).start()



def request_service(client, request, callback):
    return PendingRequest(client, request, callback).start()



_id_min = 0
_id_max = 0xFFFFFFFF
_id_lock = threading.Lock()
_id_ticker = itertools.count(_id_min)


def _id_next():
    """ Return the next request identification number, as a string.
    """

    global _id_ticker
    _id_lock.acquire()
    id = next(_id_ticker)

    if id >= _id_max:
        _id_ticker = itertools.count(_id_min)

    _id_lock.release()

    id = '%08x' % (id)
    return id


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
