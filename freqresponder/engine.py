# -*- coding: utf-8 -*-

"""The lifecycle of a file-request session. Resolution, response writing,
and descriptor parsing live in other modules; this one strings them
together and owns the state machine:

    START -> DESCRIPTOR_PARSED -> REQUESTS_RESOLVED -> RESPONSE_COMPOSED
          -> FINALIZED

There are no backward transitions. Any `ResponderError` before FINALIZED
aborts the session and propagates to the caller; the request list is only
removed once the response has been written."""

from collections import namedtuple
import logging
import os

from .descriptor import read_descriptor
from .exceptions import FinalizeFailed, ResponderError
from .magic import load_catalog
from .resolution import count_fulfilled, read_request_list, resolve_requests
from .response import append_directives, plan_response, truncate_response


logger = logging.getLogger(__name__)

# Session states
START = 'START'
DESCRIPTOR_PARSED = 'DESCRIPTOR_PARSED'
REQUESTS_RESOLVED = 'REQUESTS_RESOLVED'
RESPONSE_COMPOSED = 'RESPONSE_COMPOSED'
FINALIZED = 'FINALIZED'
STATES = (START, DESCRIPTOR_PARSED, REQUESTS_RESOLVED, RESPONSE_COMPOSED,
          FINALIZED)


class SessionOutcome(namedtuple('SessionOutcome',
                                'session_id results directives '
                                'request_list_removed')):
    """What a finished session did. `results` are in request-list order."""
    __slots__ = ()

    @property
    def fulfilled(self):
        return count_fulfilled(self.results)


class SessionLogAdapter(logging.LoggerAdapter):
    """Tags every record with the session ID, both as a `session_id`
    attribute for formatters and as a message prefix."""

    def process(self, msg, kwargs):
        session_id = self.extra['session_id']
        kwargs['extra'] = dict(kwargs.get('extra') or {},
                               session_id=session_id)
        return f'[{session_id}] {msg}', kwargs


class PacketComposer:
    """Collaborator that may build an outbound mail packet once a response
    has been written, e.g. a netmail telling the requester what was sent.
    Runs before the request list is removed; raising aborts the session."""

    def compose(self, session, outcome):
        raise NotImplementedError('abstract method')


class NullPacketComposer(PacketComposer):
    """Builds no packet."""

    def compose(self, session, outcome):
        pass


class Session:
    """One inbound file-request session, run synchronously to completion.
    Each session loads its own catalog and keeps no state after `run`."""

    def __init__(self, descriptor_path, config, packet_composer=None):
        self.descriptor_path = descriptor_path
        self.config = config
        self.packet_composer = packet_composer or NullPacketComposer()
        self.state = START
        self.descriptor = None
        self.log = logger

    def __repr__(self):
        return '%s(%r, state=%s)' % (self.__class__.__name__,
                                     self.descriptor_path, self.state)

    @property
    def session_id(self):
        if self.descriptor is None:
            return None
        return self.descriptor.session_id

    def advance(self, state):
        """Move to `state`, which must be the next state in `STATES`."""
        assert STATES.index(state) == STATES.index(self.state) + 1, \
            (self.state, state)
        self.log.debug('%s -> %s', self.state, state)
        self.state = state

    def run(self):
        """Answer the session's file requests and return a `SessionOutcome`.
        Raises a subclass of `ResponderError` if the session is aborted, and
        `RuntimeError` if the session has already been run."""
        if self.state != START:
            raise RuntimeError(f'session already run (state {self.state})')
        self.descriptor = read_descriptor(self.descriptor_path)
        self.log = SessionLogAdapter(logger, {'session_id': self.session_id})
        self.advance(DESCRIPTOR_PARSED)

        catalog = load_catalog(self.config.catalog,
                               require_existing=self.config.require_existing,
                               session_id=self.session_id)
        names = read_request_list(self.descriptor.request_list_path,
                                  session_id=self.session_id)
        self.log.info('%d file(s) requested', len(names))
        results = resolve_requests(names, catalog, self.log)
        self.advance(REQUESTS_RESOLVED)

        directives = plan_response(results, self.config.default_notice,
                                   always_notice=self.config.always_notice)
        start_size = append_directives(self.descriptor.response_list_path,
                                       directives, session_id=self.session_id)
        self.advance(RESPONSE_COMPOSED)
        fulfilled = count_fulfilled(results)
        if fulfilled:
            self.log.info('sending %d of %d requested file(s)',
                          fulfilled, len(results))
        else:
            self.log.info('nothing found, sending %s',
                          self.config.default_notice)

        outcome = SessionOutcome(self.session_id, results, directives,
                                 request_list_removed=False)
        self.packet_composer.compose(self, outcome)
        removed = self.finalize(start_size)
        self.advance(FINALIZED)
        return outcome._replace(request_list_removed=removed)

    def finalize(self, response_start_size):
        """Remove the request list. Returns True if it is gone. On failure,
        either logs and returns False, or (with the `rollback` policy) cuts
        the response list back to `response_start_size` and raises
        `FinalizeFailed`."""
        request_list_path = self.descriptor.request_list_path
        try:
            os.remove(request_list_path)
        except FileNotFoundError:
            self.log.warning('request list already removed: %s',
                             request_list_path)
            return True
        except OSError as e:
            if not self.config.rollback_on_finalize_failure:
                self.log.error('cannot remove request list %s: %s',
                               request_list_path, e)
                return False
            response_list_path = self.descriptor.response_list_path
            self.log.error('cannot remove request list %s, rolling back %s',
                           request_list_path, response_list_path)
            try:
                truncate_response(response_list_path, response_start_size)
            except OSError:
                self.log.exception('rollback of %s failed',
                                   response_list_path)
            raise FinalizeFailed(f'cannot remove request list: {e}',
                                 session_id=self.session_id,
                                 path=request_list_path) from e
        self.log.debug('removed %s', request_list_path)
        return True


class Engine(object):
    """Object responsible for running sessions against one configuration.
    Sessions share nothing but the configuration and the packet composer."""

    def __init__(self, config, packet_composer=None):
        self.config = config
        self.packet_composer = packet_composer or NullPacketComposer()

    def respond(self, descriptor_path):
        """Run the session described by `descriptor_path` and return its
        `SessionOutcome`."""
        session = Session(descriptor_path, self.config, self.packet_composer)
        return session.run()

    def sweep(self, descriptor_paths):
        """Run every session in turn. A failed session is logged and does not
        stop the others. Returns a `dict` mapping each descriptor path to
        its `SessionOutcome` or to the `ResponderError` that aborted it."""
        results = {}
        for descriptor_path in descriptor_paths:
            try:
                results[descriptor_path] = self.respond(descriptor_path)
            except ResponderError as e:
                logger.error('session aborted: %s', e)
                results[descriptor_path] = e
        return results
