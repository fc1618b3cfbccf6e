""" Configuration for a partyline subsystem. The configuration is a JSON
    document of the form::

        {"name": "orders",
         "security": {"password": "...",
                      "incomingRequiresSecure": true,
                      "outgoingRequiresSecure": true,
                      "allowedList": {"worker-id": "shared secret"}},
         "ldap": {"server": "...", "context": "...", "port": 389,
                  "cn": "...", "password": "..."}}

    Only the security block influences the behavior of the client; the ldap
    block is retained as-is for the benefit of the subsystem.
"""

import os

from . import json
from .errors import ConfigurationError


class Configuration:
    """ A convenience class to represent partyline configuration data. The
        *contents* are a dictionary matching the structure described above;
        any missing fields take on permissive defaults, which is to say no
        shared password and no requirement for secure incoming traffic.

        :ivar name: The name of this subsystem.
        :ivar password: The shared password used to stamp outbound packets.
        :ivar incoming_requires_secure: Verify fingerprints on inbound packets.
        :ivar outgoing_requires_secure: Recorded for the subsystem's benefit;
            outbound packets are always stamped.
        :ivar allowed: Dictionary of sender identity to shared secret.
        :ivar ldap: The ldap block, uninterpreted.
    """

    def __init__(self, contents=None):

        if contents is None:
            contents = dict()

        if isinstance(contents, dict):
            pass
        else:
            raise ConfigurationError('configuration must be a JSON object, not ' + type(contents).__name__)

        self.name = contents.get('name', '')

        security = contents.get('security')
        if security is None:
            security = dict()
        elif isinstance(security, dict):
            pass
        else:
            raise ConfigurationError('the security block must be a JSON object')

        password = security.get('password')
        if password is None:
            password = ''

        self.password = str(password)
        self.incoming_requires_secure = bool(security.get('incomingRequiresSecure', False))
        self.outgoing_requires_secure = bool(security.get('outgoingRequiresSecure', False))
        self.allowed = allowed_list(security.get('allowedList'))

        ldap = contents.get('ldap')
        if ldap is None:
            ldap = dict()

        self.ldap = ldap


    def __repr__(self):
        return 'Configuration(name=%r, incoming_requires_secure=%r, allowed=%r)' % (self.name, self.incoming_requires_secure, sorted(self.allowed.keys()))


    def secret(self, identity):
        """ Return the shared secret for the remote sender *identity*, or
            None if that sender is not in the allow-list.
        """

        try:
            return self.allowed[identity]
        except (KeyError, TypeError):
            return None


# end of class Configuration



def allowed_list(value):
    """ Normalize the allow-list to a dictionary mapping a sender identity to
        its shared secret. The allow-list is either specified directly as
        such a mapping, or as a list of objects each with an ``id`` and a
        ``password`` field.
    """

    if value is None:
        return dict()

    if isinstance(value, dict):
        allowed = dict()
        for identity,secret in value.items():
            allowed[str(identity)] = str(secret)
        return allowed

    if isinstance(value, (list, tuple)):
        allowed = dict()
        for entry in value:
            try:
                identity = entry['id']
                secret = entry['password']
            except (KeyError, TypeError):
                raise ConfigurationError('allowedList entries require id and password fields: ' + repr(entry))

            allowed[str(identity)] = str(secret)
        return allowed

    raise ConfigurationError('allowedList must be an object or a list, not ' + type(value).__name__)



def directory(default=None):
    """ Return the directory location where configuration files are found.
        This defaults to ``$HOME/.partyline``, but can be overridden by
        calling this method with a path, or by setting the ``PARTYLINE_HOME``
        environment variable.
    """

    if default is not None:
        default = str(default)
        default = os.path.expandvars(default)

        if os.path.isabs(default):
            pass
        else:
            raise ValueError('the default directory must be an absolute path')

        directory.found = default


    found = directory.found

    if found is not None:
        return found

    try:
        found = os.environ['PARTYLINE_HOME']
    except KeyError:
        pass
    else:
        return found

    try:
        home = os.environ['HOME']
    except KeyError:
        raise ConfigurationError('PARTYLINE_HOME and HOME environment variables not set, cannot determine partyline configuration directory')

    found = os.path.join(home, '.partyline')
    return found

directory.found = None



def load(filename):
    """ Load a :class:`Configuration` from the JSON file *filename*.
    """

    try:
        with open(filename, 'rb') as contents:
            contents = contents.read()
    except OSError as e:
        raise ConfigurationError('cannot read configuration %s: %s' % (filename, e))

    try:
        contents = json.loads(contents)
    except json.DecodeError as e:
        raise ConfigurationError('cannot parse configuration %s: %s' % (filename, e))

    return Configuration(contents)



def get(name):
    """ Load the configuration for the subsystem *name* from the directory
        returned by :func:`directory`.
    """

    filename = os.path.join(directory(), name + '.json')
    configuration = load(filename)

    if configuration.name == '':
        configuration.name = name

    return configuration


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
