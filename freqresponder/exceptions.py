# -*- coding: utf-8 -*-

"""Exceptions raised by the responder. Every `ResponderError` is fatal to
the session that raised it; `NotFound` is the only expected, non-fatal
outcome and never leaves the resolution pass."""


# `NotFound` reasons
NO_ENTRY = 'no catalog entry'
MISSING_FILE = 'missing file'

class ResponderError(Exception):
    """Base class for session-fatal errors. `session_id` and `path` give the
    orchestrator enough context to log the failure and retry the whole
    session later; either may be None."""

    def __init__(self, message, *, session_id=None, path=None):
        super().__init__(message)
        self.session_id = session_id
        self.path = path

    def __str__(self):
        message = super().__str__()
        context = []
        if self.session_id is not None:
            context.append(f'session={self.session_id}')
        if self.path is not None:
            context.append(f'path={self.path}')
        if context:
            return f'{message} ({", ".join(context)})'
        return message


class MalformedDescriptor(ResponderError):
    """The session descriptor is unreadable or lacks a required field."""
    pass


class InvalidDescriptor(ResponderError):
    """The request list and the response list are the same file."""
    pass


class RequestListUnreadable(ResponderError):
    pass


class ResponseWriteFailed(ResponderError):
    pass


class CatalogUnavailable(ResponderError):
    """The alias catalog could not be read or is not a mapping."""
    pass


class FinalizeFailed(ResponderError):
    """The request list could not be removed and the response was rolled
    back. Only raised when `finalize_failure` is `rollback`."""
    pass


class ConfigError(ResponderError):
    pass


class NotFound(LookupError):
    """No servable file answers the requested name. `reason` says why."""

    def __init__(self, name, reason=NO_ENTRY):
        super().__init__(name, reason)
        self.name = name
        self.reason = reason
