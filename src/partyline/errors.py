"""Exceptions raised by the partyline client."""


class PartyLineError(Exception):
    """Base class for all partyline errors."""


class FramingError(PartyLineError):
    """An inbound unit could not be decoded into a packet."""


class ConfigurationError(PartyLineError):
    """The subsystem configuration is missing or malformed."""
