"""
Issue Reconciler - matches local analysis findings against a remote issue server.

Establishes which server branch a local git working copy derives from, which
server project root a local file belongs to, and whether a freshly detected
local issue is already known to the server.
"""

__version__ = "1.0.0"
