# wikiboot/core/discovery.py
"""
Plugin discovery.

Searches plugin directories for plugin_meta.yaml files and registers the
components they declare:

    components:
      git_versions:
        role: versions_controller
        module: gitplugin.versions
        class: GitVersionsController

Each plugin directory is put on sys.path so its modules can be imported.
Modules are imported when the component is first constructed, not during
discovery.
"""

import importlib
import logging
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import yaml

from .registry import ROLES, ComponentRegistry

logger = logging.getLogger(__name__)

META_FILE = "plugin_meta.yaml"
DEFAULT_PLUGIN_PATH = "plugins"


def lazy_constructor(module_name: str, class_name: str) -> Callable[..., Any]:
    def construct(*args, **kwargs):
        module = importlib.import_module(module_name)
        component_class = getattr(module, class_name)
        return component_class(*args, **kwargs)
    construct.__name__ = f"{module_name}.{class_name}"
    return construct


class PluginDiscovery:
    def __init__(self, search_paths: List[str]):
        self.search_paths = search_paths

    def discover(self) -> Dict[str, Dict[str, Any]]:
        """
        Read the plugin meta files below the search paths.

        Returns:
            Component definitions keyed by name, each holding role, module,
            class and the meta file it came from
        """
        discovered = {}

        for base_path in self.search_paths:
            path = Path(base_path)
            if not path.is_dir():
                logger.debug(f"Plugin directory not found: {os.path.abspath(base_path)}")
                continue

            plugin_dir = str(path.resolve())
            if plugin_dir not in sys.path:
                sys.path.insert(0, plugin_dir)

            for meta_file in sorted(path.rglob(META_FILE)):
                try:
                    with open(meta_file, 'r', encoding='utf-8') as f:
                        metadata = yaml.safe_load(f)
                except (OSError, yaml.YAMLError) as e:
                    logger.error(f"Error processing {meta_file}: {e}")
                    continue

                if not isinstance(metadata, dict) or not isinstance(metadata.get('components'), dict):
                    logger.warning(f"Skipping {meta_file}: no 'components' mapping")
                    continue

                for comp_name, comp_def in metadata['components'].items():
                    if not isinstance(comp_def, dict) or not all(k in comp_def for k in ('role', 'module', 'class')):
                        logger.warning(
                            f"Skipping {comp_name} in {meta_file}: "
                            "missing required fields (role, module, class)"
                        )
                        continue
                    if comp_def['role'] not in ROLES:
                        logger.warning(f"Skipping {comp_name} in {meta_file}: unknown role '{comp_def['role']}'")
                        continue

                    discovered[comp_name] = {
                        'role': comp_def['role'],
                        'module': comp_def['module'],
                        'class': comp_def['class'],
                        'metadata_file': str(meta_file),
                    }

        return discovered

    def register_plugins(self, registry: ComponentRegistry) -> int:
        """Register every discovered component; returns how many were registered."""
        discovered = self.discover()
        for name, definition in discovered.items():
            registry.register(definition['role'], name,
                              lazy_constructor(definition['module'], definition['class']))
        if discovered:
            logger.info(f"Discovered {len(discovered)} plugin components in {self.search_paths}")
        return len(discovered)
