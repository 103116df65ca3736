# -*- coding: utf-8 -*-

"""Parser for the session descriptor the mailer writes for each inbound
file-request session. The descriptor is SRIF-style text, one keyword and
value per line:

    Sysop John Smith
    AKA 2:5020/1
    AKA 2:5020/1.1
    RequestList /var/spool/binkd/inbound/0000a001.req
    ResponseList /var/spool/binkd/inbound/0000a001.rsp
    RemoteStatus PROTECTED

Keywords are case-insensitive. Only `RequestList` and `ResponseList` are
required."""

from collections import namedtuple
import logging
import os
from pathlib import Path

from .exceptions import InvalidDescriptor, MalformedDescriptor


logger = logging.getLogger(__name__)

REQUEST_LIST = 'requestlist'
RESPONSE_LIST = 'responselist'
AKA = 'aka'
REQUIRED_KEYWORDS = (REQUEST_LIST, RESPONSE_LIST)
COMMENT_PREFIXES = (';', '#')
# Keywords with a dedicated field; anything else ends up in `extra`.
KNOWN_KEYWORDS = {
    'requestlist': 'request_list_path',
    'responselist': 'response_list_path',
    'sysop': 'sysop',
    'remotestatus': 'remote_status',
    'systemstatus': 'system_status',
    'sessiontype': 'session_type',
}
UNKNOWN_SESSION = 'unknown'


_SessionDescriptor = namedtuple(
    '_SessionDescriptor',
    'request_list_path response_list_path session_id akas sysop '
    'remote_status system_status session_type extra')


class SessionDescriptor(_SessionDescriptor):
    """Immutable record of one session. Built only by `parse_descriptor`,
    which guarantees the two list paths differ."""
    __slots__ = ()

    @property
    def protected(self):
        """True if the remote presented a valid session password."""
        return (self.remote_status or '').upper() == 'PROTECTED'


def read_descriptor(path):
    """Read and parse the descriptor file at `path`. The file's stem names
    the session when the descriptor carries no AKA."""
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8', errors='surrogateescape')
    except OSError as e:
        raise MalformedDescriptor(f'cannot read descriptor: {e}',
                                  path=str(path)) from e
    return parse_descriptor(text, name=path.stem)


def parse_descriptor(text, name=None):
    """Return the `SessionDescriptor` described by `text`. Raises
    `MalformedDescriptor` if a required keyword is absent and
    `InvalidDescriptor` if the request list and response list paths are
    the same. Performs no I/O."""
    fields = {}
    akas = []
    extra = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue
        keyword, *rest = line.split(None, 1)
        keyword = keyword.lower()
        value = rest[0].strip() if rest else ''
        if keyword == AKA:
            if value:
                akas.append(value)
        elif keyword in KNOWN_KEYWORDS:
            fields[KNOWN_KEYWORDS[keyword]] = value
        else:
            extra[keyword] = value
    session_id = akas[0] if akas else (name or UNKNOWN_SESSION)
    missing = [keyword for keyword in REQUIRED_KEYWORDS
               if not fields.get(KNOWN_KEYWORDS[keyword])]
    if missing:
        raise MalformedDescriptor(
            f'missing required keywords: {", ".join(missing)}',
            session_id=session_id)
    request_list_path = fields['request_list_path']
    response_list_path = fields['response_list_path']
    if os.path.normpath(request_list_path) == \
            os.path.normpath(response_list_path):
        raise InvalidDescriptor(
            'request list and response list are the same file',
            session_id=session_id, path=request_list_path)
    descriptor = SessionDescriptor(
        request_list_path=request_list_path,
        response_list_path=response_list_path,
        session_id=session_id,
        akas=tuple(akas),
        sysop=fields.get('sysop'),
        remote_status=fields.get('remote_status'),
        system_status=fields.get('system_status'),
        session_type=fields.get('session_type'),
        extra=extra,
    )
    logger.debug('parsed descriptor: %r', descriptor)
    return descriptor
