# =============================================================================
# clineng_core/__init__.py
# Core package for the ALVS clinical-engineering workbench
# =============================================================================
"""
Entity store, local persistence mirror and remote synchronizer for the
equipment / customer / supplier / service-record collections.

Usage:
------
from clineng_core import load_config, build_synchronizer

sync = build_synchronizer(load_config())
sync.start()
equipment = sync.add_equipment(fields)
"""

from clineng_core.config import AppConfig, load_config, build_synchronizer

__all__ = ["AppConfig", "load_config", "build_synchronizer"]
