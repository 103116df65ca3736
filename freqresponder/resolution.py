# -*- coding: utf-8 -*-

"""The resolution pass: read the names a remote system asked for and decide,
one line at a time, which of them this node can serve."""

from collections import namedtuple
import logging
from pathlib import Path

from .exceptions import NotFound, RequestListUnreadable


logger = logging.getLogger(__name__)


class Fulfilled(namedtuple('Fulfilled', 'name path')):
    """`name` was requested and `path` answers it."""
    __slots__ = ()
    fulfilled = True


class Unfulfilled(namedtuple('Unfulfilled', 'name reason')):
    """`name` was requested but nothing answers it."""
    __slots__ = ()
    fulfilled = False


def read_request_list(path, session_id=None):
    """Return the requested names in file order, skipping blank lines. Raises
    `RequestListUnreadable` if the file can't be read."""
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8', errors='surrogateescape')
    except OSError as e:
        raise RequestListUnreadable(f'cannot read request list: {e}',
                                    session_id=session_id,
                                    path=str(path)) from e
    return list(iterate_request_names(text.splitlines()))


def iterate_request_names(lines):
    """Yield each non-blank line, stripped."""
    for line in lines:
        name = line.strip()
        if name:
            yield name


def resolve_requests(names, catalog, log=logger):
    """Return one `Fulfilled` or `Unfulfilled` per name, in input order.
    Every name is resolved on its own; duplicates are not merged and a miss
    never stops the pass."""
    results = []
    for name in names:
        try:
            path = catalog.resolve(name)
        except NotFound as e:
            result = Unfulfilled(name, e.reason)
            log.info('not found: %s (%s)', name, e.reason)
        else:
            result = Fulfilled(name, path)
            log.info('found: %s -> %s', name, path)
        results.append(result)
    return results


def count_fulfilled(results):
    return sum(1 for result in results if result.fulfilled)
