"""scmt -- server configuration management tool.

Keeps the named configuration options and assigned roles of a machine in a
JSON document, with an append-only change log recording who changed what,
when, and why.
"""

__version__ = "0.3.0"
