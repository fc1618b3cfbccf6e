""" Python client library for partyline subsystems. A subsystem is a worker
    process that exchanges JSON packets with a central router, the bus, over
    its standard input and output.
"""

# Utility components.

from . import json
from . import log
from . import fields
from . import errors

# Submodules used by multiple other components.

from . import config
from . import context
from . import fingerprint
from . import packet
from . import sendqueue
from . import timer
from . import transport
from . import dispatch
from . import discovery

# Primary public-facing interfaces.

from .client import Client, Identity
from .config import Configuration
from .errors import PartyLineError, FramingError, ConfigurationError

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
