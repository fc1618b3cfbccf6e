""" Context matching. A context is a hierarchical address string, such as
    ``app.orders.detail``; a subsystem subscribes to one or more context
    prefixes, and the bus routes any packet whose context begins with one
    of those prefixes to the subsystem. The bus is expected to do the
    filtering, but the client checks again on arrival.
"""


def normalize(contexts):
    """ Return the subscription *contexts* as a list. A single string is
        treated as a set of one subscription; None is an empty set.
    """

    if contexts is None:
        return list()

    if isinstance(contexts, str):
        return [contexts]

    return list(contexts)



def matches(candidate, worker_id, contexts):
    """ Return True if the *candidate* context addresses a subsystem with
        the given *worker_id* and subscribed *contexts*. A candidate equal
        to the worker id is always a match; otherwise it must begin with
        at least one of the subscribed prefixes. The comparison is literal
        and case-sensitive.
    """

    if candidate is None:
        return False

    if worker_id and candidate == worker_id:
        return True

    if isinstance(candidate, str):
        pass
    else:
        return False

    for prefix in normalize(contexts):
        if candidate.startswith(prefix):
            return True

    return False



class Subscriptions:
    """ The ordered set of context prefixes a subsystem listens on. Every
        change invokes the *announce* callable with a copy of the full list,
        so that the bus always has the complete picture.
    """

    def __init__(self, announce=None, contexts=None):

        self.announce = announce
        self.contexts = normalize(contexts)


    def __contains__(self, context):
        return context in self.contexts


    def __iter__(self):
        return iter(self.contexts)


    def __len__(self):
        return len(self.contexts)


    def add(self, context):
        """ Append a prefix to the subscription list.
        """

        self.contexts.append(context)
        self._announce()


    def remove(self, context):
        """ Remove any/all instances of a prefix from the subscription list.
            The full list is announced even if nothing was removed.
        """

        self.contexts = [existing for existing in self.contexts if existing != context]
        self._announce()


    def matches(self, candidate, worker_id):
        return matches(candidate, worker_id, self.contexts)


    def _announce(self):

        if self.announce is None:
            return

        self.announce(list(self.contexts))


# end of class Subscriptions


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
