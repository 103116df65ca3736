# -*- coding: utf-8 -*-

"""The alias ("magic") catalog. A catalog is a YAML mapping from the names
remote systems may request to the real files that answer them:

    NODELIST: /srv/fido/pub/nodelist.zip
    FILES: /srv/fido/pub/allfiles.txt

Lookup is a single exact-match step: no chained aliases, no wildcards, no
case folding. A `Catalog` is loaded once per session and never changes
afterwards, so sessions in the same process each load their own."""

import logging
import os
from pathlib import Path
from types import MappingProxyType

import yaml

from .exceptions import MISSING_FILE, CatalogUnavailable, NotFound


logger = logging.getLogger(__name__)


class Catalog:
    """Read-only alias catalog. If `require_existing` is true, an alias
    whose target does not exist on disk resolves as `NotFound`."""

    def __init__(self, entries, *, require_existing=False):
        self.entries = MappingProxyType(dict(entries))
        self.require_existing = require_existing

    def __len__(self):
        return len(self.entries)

    def __contains__(self, name):
        return name in self.entries

    def __repr__(self):
        return '%s(%d entries)' % (self.__class__.__name__, len(self))

    def resolve(self, name):
        """Return the path that serves `name`, or raise `NotFound`."""
        try:
            path = self.entries[name]
        except KeyError:
            raise NotFound(name) from None
        if self.require_existing and not os.path.isfile(path):
            raise NotFound(name, MISSING_FILE)
        return path


def load_catalog(path, *, require_existing=False, session_id=None):
    """Load the YAML catalog at `path`. Raises `CatalogUnavailable` if the
    file can't be read or parsed, or isn't a mapping of names to paths.
    Scalars are read with `yaml.BaseLoader`, so every name stays the exact
    string written in the file (`ON` is not `True`, `010` is not `8`)."""
    path = Path(path)
    try:
        with path.open(encoding='utf-8', errors='surrogateescape') as fin:
            document = yaml.load(fin, Loader=yaml.BaseLoader)
    except (OSError, yaml.YAMLError) as e:
        raise CatalogUnavailable(f'cannot load catalog: {e}',
                                 session_id=session_id,
                                 path=str(path)) from e
    if document is None:
        document = {}  # Empty file
    if not isinstance(document, dict):
        raise CatalogUnavailable('catalog is not a mapping',
                                 session_id=session_id, path=str(path))
    entries = {}
    for name, target in document.items():
        if not isinstance(target, str) or not target:
            raise CatalogUnavailable(f'alias {name!r} has no target',
                                     session_id=session_id, path=str(path))
        if '\n' in target or '\r' in target:
            raise CatalogUnavailable(f'line break in target of {name!r}',
                                     session_id=session_id, path=str(path))
        entries[name] = target
    logger.debug('loaded %d aliases from %s', len(entries), path)
    return Catalog(entries, require_existing=require_existing)
