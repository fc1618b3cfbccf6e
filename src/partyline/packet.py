""" Convenience constructors for the control packets exchanged with the bus,
    and for the responses exchanged between subsystems.
"""

from . import fields


def who_am_i():
    packet = dict()
    packet['context'] = fields.BUS
    packet['type'] = fields.WHO_AM_I
    return packet


def set_listen_context(contexts):
    packet = dict()
    packet['context'] = fields.BUS
    packet['type'] = fields.SET_LISTEN_CONTEXT
    packet['listen_context'] = list(contexts)
    return packet


def sap_query(context):
    """ Ask the bus which subsystems are listening on *context*; the bus
        answers with a ``serviceList`` packet.
    """

    packet = dict()
    packet['context'] = fields.BUS
    packet['type'] = fields.SAP_QUERY
    packet['service_context'] = context
    return packet


def close(exit_level=0):
    packet = dict()
    packet['type'] = fields.CLOSE
    packet['exit_level'] = exit_level
    return packet


def error(data):
    packet = dict()
    packet['type'] = fields.ERROR
    packet['data'] = data
    return packet


def response(request, **payload):
    """ Build a ``response`` to the *request* packet, addressed directly to
        the requesting subsystem. Any keyword arguments are included as the
        payload of the response.
    """

    packet = dict(payload)
    packet['context'] = request.get('from')
    packet['type'] = fields.RESPONSE

    try:
        packet['request_id'] = request['request_id']
    except KeyError:
        pass

    return packet


def no_response(request):
    """ Build a ``noResponse`` to the *request* packet, declining to answer.
    """

    packet = response(request)
    packet['type'] = fields.NO_RESPONSE
    return packet


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
