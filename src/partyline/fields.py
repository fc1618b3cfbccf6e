""" Protocol constants.

Keep these in one place to avoid stringly-typed packet handling.
"""

# Sender identity and context used by the bus itself.
BUS = "bus"

# Registering a handler for this type receives every accepted packet.
WILDCARD = "*"

# Control packets consumed from the bus.
YOU_ARE = "youAre"
SERVICE_LIST = "serviceList"

# Control packets emitted to the bus.
WHO_AM_I = "whoAmI"
SET_LISTEN_CONTEXT = "setListenContext"
SAP_QUERY = "sapQuery"
CLOSE = "close"
ERROR = "error"

# Request/response exchange between subsystems.
RESPONSE = "response"
NO_RESPONSE = "noResponse"
