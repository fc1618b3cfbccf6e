""" A minimal pair of subsystems: an order desk that answers requests on the
    ``app.orders`` context, and a front end that asks it for the status of
    an order once the bus has assigned an identity. Run either one under a
    bus; the subsystem role is selected by the first argument.
"""

import sys

import partyline


stock = {'widget': 12, 'gadget': 0}


def order_desk(client):

    def handle(request):
        item = request.get('item')

        try:
            count = stock[item]
        except KeyError:
            # Not ours to answer; perhaps another order desk knows.
            client.decline(request)
            return

        client.respond(request, item=item, in_stock=count)

    client.on('status', handle)
    client.add_listening_context('app.orders')


def front_end(client):

    def answered(response):
        if response is False:
            print('nobody knows about widgets', file=sys.stderr)
        else:
            print('%d widgets in stock' % (response['in_stock']), file=sys.stderr)

    def identified(packet):
        request = {'context': 'app.orders', 'type': 'status', 'item': 'widget'}
        client.request_service(request, answered)

    client.once('youAre', identified)


def main():

    role = sys.argv[1]
    partyline.log.configure(role)

    client = partyline.Client(partyline.config.get(role))

    if role == 'orders':
        order_desk(client)
    else:
        front_end(client)

    client.run()


if __name__ == '__main__':
    main()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
