# -*- coding: utf-8 -*-

"""File-request responder for a store-and-forward mailer. When a remote
system asks for files, the mailer writes a session descriptor naming a
request list (the names asked for) and a response list (where the answer
goes), then runs the responder on it.

The lifecycle of a session:

1. Parse the descriptor and check that the two lists are distinct files.
2. Load the alias catalog, which maps requestable names to real files.
3. Read the request list and resolve every name against the catalog.
4. Append one `=path` line per resolved name to the response list, or a
   single `+notice` line if nothing resolved.
5. Remove the request list, so a retry won't answer the same request twice.

The mailer then sends whatever the response list names and applies each
line's disposition to the file afterwards.
"""

from .config import ResponderConfig
from .engine import Engine, NullPacketComposer, PacketComposer, Session


__version__ = '0.1.0'

__all__ = ['__version__', 'Engine', 'NullPacketComposer', 'PacketComposer',
           'ResponderConfig', 'Session']
