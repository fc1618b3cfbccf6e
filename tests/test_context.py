import partyline


def test_undefined_context():
    assert partyline.context.matches(None, 'worker-1', ['app']) == False
    assert partyline.context.matches(None, '', ['']) == False


def test_direct_addressing():
    """ A packet addressed to the worker id is always a match, even with
        no subscriptions at all.
    """

    assert partyline.context.matches('worker-1', 'worker-1', []) == True
    assert partyline.context.matches('worker-2', 'worker-1', []) == False

    # An unbound identity must not match an empty context.

    assert partyline.context.matches('', '', []) == False


def test_prefix():

    subscriptions = ['app.orders', 'sys.']

    assert partyline.context.matches('app.orders', 'w', subscriptions) == True
    assert partyline.context.matches('app.orders.detail', 'w', subscriptions) == True
    assert partyline.context.matches('app.ordersX', 'w', subscriptions) == True
    assert partyline.context.matches('sys.log', 'w', subscriptions) == True

    assert partyline.context.matches('app.inventory', 'w', subscriptions) == False
    assert partyline.context.matches('App.orders', 'w', subscriptions) == False
    assert partyline.context.matches('app', 'w', subscriptions) == False
    assert partyline.context.matches('sys', 'w', subscriptions) == False


def test_non_string_context():
    assert partyline.context.matches(12, 'w', ['1']) == False
    assert partyline.context.matches(['app'], 'w', ['app']) == False


def test_normalize():

    assert partyline.context.normalize(None) == []
    assert partyline.context.normalize('app') == ['app']
    assert partyline.context.normalize(('a', 'b')) == ['a', 'b']

    # A single string subscription is a prefix, not a set of characters.

    assert partyline.context.matches('app.orders', 'w', 'app') == True
    assert partyline.context.matches('a', 'w', 'app') == False


def test_subscriptions_announce():

    announced = list()
    subscriptions = partyline.context.Subscriptions(announced.append)

    subscriptions.add('app.orders')
    subscriptions.add('app.billing')
    subscriptions.add('app.orders')

    assert announced[0] == ['app.orders']
    assert announced[1] == ['app.orders', 'app.billing']
    assert announced[2] == ['app.orders', 'app.billing', 'app.orders']

    subscriptions.remove('app.orders')
    assert announced[3] == ['app.billing']
    assert list(subscriptions) == ['app.billing']

    subscriptions.remove('not.there')
    assert announced[4] == ['app.billing']
    assert len(announced) == 5

    # The announced lists are copies, not the live subscription list.

    announced[4].append('tampered')
    assert 'tampered' not in subscriptions


def test_client_listen_context(client, emitted):

    client.add_listening_context('app.orders')
    client.add_listening_context('app.billing')
    client.remove_listening_context('app.orders')

    packets = emitted()
    assert len(packets) == 3

    for packet in packets:
        assert packet['context'] == 'bus'
        assert packet['type'] == 'setListenContext'

    assert packets[0]['listen_context'] == ['app.orders']
    assert packets[1]['listen_context'] == ['app.orders', 'app.billing']
    assert packets[2]['listen_context'] == ['app.billing']

    assert client.listen_context == ['app.billing']


def test_client_matches(bound):

    bound.add_listening_context('app.orders')

    assert bound.matches('app.orders.detail') == True
    assert bound.matches('worker-1') == True
    assert bound.matches('app.inventory') == False
    assert bound.matches(None) == False


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
