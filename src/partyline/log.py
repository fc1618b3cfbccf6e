""" Logging setup for a partyline subsystem.

    Standard output is the bus channel; nothing written by the logging
    machinery may land there. By default records go to standard error,
    or to a per-instance log file when a directory is provided.

    Levels, as used throughout the package:

    - DEBUG: packet-level tracing (emissions, dispatch, timer expiry)
    - INFO: session lifecycle (identity bound, subscriptions, closure)
    - WARNING: dropped packets, bus protocol and security violations
    - ERROR: handler faults and unhandled failures, with tracebacks
"""

import logging
import os
import sys

log_format = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'


def filename(name, label=None):
    """ Return the log file name for the subsystem *name*. The optional
        *label* distinguishes multiple instances of the same subsystem.
    """

    if label:
        return '%s.%s.log' % (name, label)
    else:
        return name + '.log'



def configure(name, label=None, directory=None, level=None):
    """ Install a handler on the ``partyline`` logger. If *directory* is
        specified, records are appended to a file named according to
        :func:`filename`; otherwise they go to standard error. The *level*
        defaults to the ``PARTYLINE_LOG_LEVEL`` environment variable, or
        INFO if that is not set. The handler is returned so the caller
        can remove it later.
    """

    if level is None:
        level = os.environ.get('PARTYLINE_LOG_LEVEL', 'INFO').upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR'):
            level = 'INFO'

    if isinstance(level, str):
        level = getattr(logging, level)

    if directory is None:
        handler = logging.StreamHandler(sys.stderr)
    else:
        if os.path.exists(directory):
            pass
        else:
            os.makedirs(directory, mode=0o775)

        target = os.path.join(directory, filename(name, label))
        handler = logging.FileHandler(target)

    handler.setFormatter(logging.Formatter(log_format, datefmt='%Y-%m-%d %H:%M:%S'))

    logger = logging.getLogger('partyline')
    logger.setLevel(level)
    logger.addHandler(handler)

    return handler


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
