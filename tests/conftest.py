import io
import json
import pytest

import partyline


password = 'unittest password'
peer_secret = 'peer secret'


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def configuration():

    contents = dict()
    contents['name'] = 'unittest'
    contents['security'] = dict()
    contents['security']['password'] = password
    contents['security']['incomingRequiresSecure'] = False
    contents['security']['outgoingRequiresSecure'] = True
    contents['security']['allowedList'] = {'peer': peer_secret}

    return partyline.Configuration(contents)


@pytest.fixture
def client(configuration, output):

    transport = partyline.transport.StreamTransport(io.StringIO(), output)
    client = partyline.Client(configuration, transport)
    client.timeout = 0.05
    return client


@pytest.fixture
def emitted(output):
    """ Return a function that returns the packets written to the output
        stream since the last time it was called.
    """

    def emitted():
        lines = output.getvalue().splitlines()
        output.seek(0)
        output.truncate(0)
        return [json.loads(line) for line in lines]

    return emitted


def you_are(worker_id='worker-1', bus_id='bus-1'):
    packet = dict()
    packet['from'] = 'bus'
    packet['type'] = 'youAre'
    packet['worker_id'] = worker_id
    packet['bus_id'] = bus_id
    return packet


@pytest.fixture
def bound(client, emitted):
    """ A client whose identity has been assigned by the bus.
    """

    client.accept(you_are())
    emitted()
    return client


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
