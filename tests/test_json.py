import json
import partyline


def test_partyline_encode_and_decode():

    packet = dict()
    packet['context'] = 'app.orders'
    packet['type'] = 'order'
    packet['listen_context'] = ['app', 'sys']
    packet['none'] = None
    packet['true'] = True
    packet['timestamp'] = 1700000000000

    encoded = partyline.json.dumps(packet)

    # The bus expects bytes-equivalent compact output from every backend,
    # with no whitespace between tokens.

    assert isinstance(encoded, bytes)
    assert b' ' not in encoded
    assert b'\n' not in encoded

    assert json.loads(encoded) == packet
    assert partyline.json.loads(encoded) == packet


def test_decode_error():

    try:
        partyline.json.loads(b'{"context": ')
    except partyline.json.DecodeError:
        pass
    else:
        raise RuntimeError('expected a decode error')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
