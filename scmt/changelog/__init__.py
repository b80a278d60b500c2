"""Change log for scmt.

Durable, queryable history of every option and role mutation.

Submodules:
    change_log  -- ChangeLog: append, persist, load, select and render.
"""

from scmt.changelog.change_log import ChangeLog

__all__ = ["ChangeLog"]
