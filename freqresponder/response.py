# -*- coding: utf-8 -*-

"""Writing the response list. Each line the mailer reads back is a
disposition character followed by a path:

    =/srv/fido/pub/nodelist.zip     send, then erase if the send succeeded
    +/srv/fido/notice.txt           send, never erase
    -/tmp/outbound/report.txt       send, then erase no matter what

The file is only ever appended to. Each directive goes out in its own
`write` on an `O_APPEND` descriptor, so a line is never interleaved with
another writer's line."""

from collections import namedtuple
import logging
import os

from .exceptions import ResponseWriteFailed


logger = logging.getLogger(__name__)

# Disposition codes
ERASE_IF_SENT = '='
KEEP_ALWAYS = '+'
ERASE_ALWAYS = '-'
DISPOSITIONS = {ERASE_IF_SENT, KEEP_ALWAYS, ERASE_ALWAYS}

# Response list lines may hold any bytes a filename can.
ENCODING = 'utf-8'
ERRORS = 'surrogateescape'


class ResponseDirective(namedtuple('ResponseDirective', 'disposition path')):
    """One line of the response list."""
    __slots__ = ()

    def __new__(cls, disposition, path):
        if disposition not in DISPOSITIONS:
            raise ValueError(f'bad disposition: {disposition!r}')
        path = str(path)
        if '\n' in path or '\r' in path:
            raise ValueError(f'line break in path: {path!r}')
        return super().__new__(cls, disposition, path)

    def to_line(self):
        return f'{self.disposition}{self.path}\n'


def plan_response(results, default_notice, always_notice=False):
    """Return the directives for a set of resolution results: one
    `ERASE_IF_SENT` per fulfilled result, plus a `KEEP_ALWAYS` directive for
    `default_notice` when nothing was fulfilled (or on every session when
    `always_notice` is set, which reproduces older responders)."""
    directives = [ResponseDirective(ERASE_IF_SENT, result.path)
                  for result in results if result.fulfilled]
    if always_notice or not directives:
        directives.append(ResponseDirective(KEEP_ALWAYS, default_notice))
    return directives


def append_directives(path, directives, session_id=None):
    """Append `directives` to the response list at `path`, creating it if
    needed. Returns the size the file had before this call, which is where
    a rollback truncates to. Raises `ResponseWriteFailed`, after cutting
    off whatever part of this call's lines made it into the file."""
    path = os.fspath(path)
    try:
        fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
    except OSError as e:
        raise ResponseWriteFailed(f'cannot open response list: {e}',
                                  session_id=session_id, path=path) from e
    start_size = None
    try:
        start_size = os.fstat(fd).st_size
        for directive in directives:
            write_fully(fd, directive.to_line().encode(ENCODING, ERRORS))
    except OSError as e:
        if start_size is not None:
            try:
                os.ftruncate(fd, start_size)
            except OSError:
                logger.exception('cannot cut %s back to %d bytes',
                                 path, start_size)
        raise ResponseWriteFailed(f'cannot write response list: {e}',
                                  session_id=session_id, path=path) from e
    finally:
        os.close(fd)
    return start_size


def write_fully(fd, data):
    """Write all of `data` to `fd`. A write that makes no progress raises
    `OSError`."""
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        if written <= 0:
            raise OSError(f'short write: {len(view)} bytes left')
        view = view[written:]


def truncate_response(path, size):
    """Cut the response list at `path` back to `size` bytes."""
    os.truncate(path, size)
