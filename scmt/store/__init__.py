"""Configuration store for scmt.

Owns the current option and role snapshot of a machine and its persistence.

Submodules:
    config_store  -- ConfigStore: get/set/roles, load/save and dump.
    defaults      -- Default option table used by initialize().
"""

from scmt.store.config_store import ConfigStore
from scmt.store.defaults import DEFAULT_OPTIONS, INITIALIZE_MESSAGE

__all__ = ["DEFAULT_OPTIONS", "INITIALIZE_MESSAGE", "ConfigStore"]
