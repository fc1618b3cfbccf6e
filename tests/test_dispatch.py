import logging

import partyline
import pytest

from conftest import you_are


def test_identity_assignment(client, emitted):

    seen = list()
    client.on('youAre', seen.append)

    assert client.worker_id == ''
    assert client.identity.bound == False

    assert client.accept(you_are('worker-7', 'bus-3')) == True
    assert client.worker_id == 'worker-7'
    assert client.bus_id == 'bus-3'
    assert len(seen) == 1

    # The identity is bound once per session.

    assert client.accept(you_are('worker-8', 'bus-4')) == True
    assert client.worker_id == 'worker-7'
    assert client.bus_id == 'bus-3'
    assert len(seen) == 2


def test_bus_always_dispatches(client):
    """ The bus is trusted: its packets skip context and fingerprint checks.
    """

    client.configuration.incoming_requires_secure = True

    seen = list()
    client.on('serviceList', seen.append)

    packet = {'from': 'bus', 'type': 'serviceList', 'context': 'elsewhere'}
    assert client.accept(packet) == True
    assert seen == [packet]


def test_context_scenario(bound, caplog):

    seen = list()
    bound.on('order', seen.append)
    bound.add_listening_context('app.orders')

    accepted = {'context': 'app.orders.detail', 'type': 'order', 'from': 'peer'}
    dropped = {'context': 'app.inventory', 'type': 'order', 'from': 'peer'}

    with caplog.at_level(logging.WARNING, logger='partyline.dispatch'):
        assert bound.accept(accepted) == True
        assert bound.accept(dropped) == False

    assert seen == [accepted]
    assert 'bus protocol violation' in caplog.text
    assert 'app.inventory' in caplog.text


def test_missing_context(bound):

    seen = list()
    bound.on(partyline.fields.WILDCARD, seen.append)
    bound.add_listening_context('')

    assert bound.accept({'type': 'order', 'from': 'peer'}) == False
    assert seen == []


def test_security(bound, caplog):

    bound.configuration.incoming_requires_secure = True
    bound.add_listening_context('app')

    seen = list()
    bound.on('order', seen.append)

    peer = partyline.Identity()
    peer.bind('peer', 'bus-1')
    peer_configuration = partyline.Configuration({'security': {'password': 'peer secret'}})
    stamper = partyline.fingerprint.Fingerprint(peer_configuration, peer)

    good = stamper.stamp({'context': 'app.orders', 'type': 'order', 'from': 'peer'})
    assert bound.accept(good) == True

    forged = stamper.stamp({'context': 'app.orders', 'type': 'order', 'from': 'peer'})
    forged['timestamp'] += 1

    unsigned = {'context': 'app.orders', 'type': 'order', 'from': 'peer'}

    with caplog.at_level(logging.WARNING, logger='partyline.dispatch'):
        assert bound.accept(forged) == False
        assert bound.accept(unsigned) == False

    assert seen == [good]
    assert 'security violation' in caplog.text

    # With incoming security disabled the same packets pass.

    bound.configuration.incoming_requires_secure = False
    assert bound.accept(unsigned) == True
    assert seen == [good, unsigned]


def test_handler_fault_isolation(bound, caplog):
    """ A failing handler does not prevent any other handler, for the same
        type or the wildcard type, from being invoked.
    """

    bound.add_listening_context('app')
    calls = list()

    def broken(packet):
        calls.append('broken')
        raise RuntimeError('handler failure')

    def working(packet):
        calls.append('working')

    def everything(packet):
        calls.append('everything')

    bound.on('order', broken)
    bound.on('order', working)
    bound.on(partyline.fields.WILDCARD, broken)
    bound.on(partyline.fields.WILDCARD, everything)

    packet = {'context': 'app.orders', 'type': 'order', 'marker': 'offending'}

    with caplog.at_level(logging.ERROR, logger='partyline.dispatch'):
        assert bound.accept(packet) == True

    assert calls == ['broken', 'working', 'broken', 'everything']
    assert 'handler failure' in caplog.text
    assert 'offending' in caplog.text

    calls.clear()
    bound.accept({'context': 'app.orders', 'type': 'other'})
    assert calls == ['broken', 'everything']


def test_once(bound):

    bound.add_listening_context('app')

    seen = list()
    bound.once('order', seen.append)

    first = {'context': 'app', 'type': 'order', 'number': 1}
    second = {'context': 'app', 'type': 'order', 'number': 2}

    bound.accept(first)
    bound.accept(second)

    assert seen == [first]
    assert 'order' not in bound.dispatcher.handlers


def test_cancel(bound):

    bound.add_listening_context('app')

    seen = list()
    registration = bound.on('order', seen.append)
    registration.cancel()

    bound.accept({'context': 'app', 'type': 'order'})
    assert seen == []


def test_register_during_dispatch(bound):

    bound.add_listening_context('app')
    seen = list()

    def late(packet):
        seen.append(('late', packet['number']))

    def registrar(packet):
        seen.append(('registrar', packet['number']))
        if packet['number'] == 1:
            bound.on('order', late)

    bound.on('order', registrar)

    bound.accept({'context': 'app', 'type': 'order', 'number': 1})
    bound.accept({'context': 'app', 'type': 'order', 'number': 2})

    assert seen == [('registrar', 1), ('registrar', 2), ('late', 2)]


def test_not_a_packet(client, caplog):

    with caplog.at_level(logging.WARNING, logger='partyline.dispatch'):
        assert client.accept(['not', 'a', 'packet']) == False
        assert client.accept('string') == False

    assert 'framing error' in caplog.text


def test_callable_required(client):

    with pytest.raises(TypeError):
        client.on('order', 'not callable')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
