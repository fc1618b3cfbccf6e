''' Wrapper module to select the most performant available library to handle
    the equivalent of :func:`json.loads` and :func:`json.dumps`.
'''

# The business about conditionally importing the libraries is intended to
# avoid importing less efficient libraries if they are not available.

orjson = None
json = None

try:
    import orjson
except ImportError:
    import json


# orjson.dumps returns compact bytes. To maintain alignment the fallback
# 'dumps' method needs to do the same; the bus expects one compact document
# per line, with no embedded whitespace.

def json_dumps(value):
    return json.dumps(value, separators=(',', ':')).encode()


if orjson is not None:
    dumps = orjson.dumps
    loads = orjson.loads
    DecodeError = orjson.JSONDecodeError
else:
    dumps = json_dumps
    loads = json.loads
    DecodeError = json.JSONDecodeError


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
