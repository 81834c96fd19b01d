#!/usr/bin/env python3
"""Tests for the component registry, component resolution and plugin discovery."""

import os
import shutil
import sys
import tempfile
import textwrap
import unittest

from wikiboot.core import registry as roles
from wikiboot.core.component_factory import ComponentFactory, VERSIONS_CONTROLLER
from wikiboot.core.config import MergedConfiguration
from wikiboot.core.discovery import PluginDiscovery
from wikiboot.core.exceptions import ComponentError
from wikiboot.core.registry import ComponentRegistry, default_registry
from wikiboot.wiki.versions import NullVersionsController, ZipFileVersionsController


class ConfiguredComponent:
    def __init__(self, config):
        self.config = config


class BrokenComponent:
    def __init__(self):
        raise RuntimeError("cannot build")


class OptionallyConfiguredComponent:
    def __init__(self, config=None):
        self.config = config


class MisconfiguredComponent:
    def __init__(self, config):
        self.days = len(config.get("VersionsController.days"))


class TestComponentRegistry(unittest.TestCase):

    def test_default_registry_has_a_default_per_role(self):
        registry = default_registry()

        self.assertTrue(registry.is_registered(roles.PAGE_FACTORY, "file_system"))
        self.assertTrue(registry.is_registered(roles.VERSIONS_CONTROLLER, "zip"))
        self.assertTrue(registry.is_registered(roles.VERSIONS_CONTROLLER, "no_history"))
        self.assertTrue(registry.is_registered(roles.RECENT_CHANGES, "wiki_page"))
        self.assertTrue(registry.is_registered(roles.AUTHENTICATOR, "promiscuous"))

    def test_unknown_name(self):
        registry = ComponentRegistry()
        with self.assertRaises(ComponentError):
            registry.get(roles.VERSIONS_CONTROLLER, "git")

    def test_unknown_role(self):
        with self.assertRaises(ComponentError):
            ComponentRegistry().register("storage_engine", "x", object)

    def test_names(self):
        registry = default_registry()
        self.assertEqual(registry.names(roles.VERSIONS_CONTROLLER), ["no_history", "zip"])


class TestComponentFactory(unittest.TestCase):

    def setUp(self):
        self.registry = default_registry()
        self.registry.register(roles.VERSIONS_CONTROLLER, "configured", ConfiguredComponent)
        self.registry.register(roles.VERSIONS_CONTROLLER, "broken", BrokenComponent)

    def _factory(self, values):
        return ComponentFactory(MergedConfiguration(values), self.registry)

    def test_absent_key_uses_default(self):
        component = self._factory({}).create_component(VERSIONS_CONTROLLER, roles.VERSIONS_CONTROLLER, "zip")
        self.assertIsInstance(component, ZipFileVersionsController)

    def test_configured_name_is_used(self):
        component = self._factory({VERSIONS_CONTROLLER: "no_history"}).create_component(
            VERSIONS_CONTROLLER, roles.VERSIONS_CONTROLLER, "zip")
        self.assertIsInstance(component, NullVersionsController)

    def test_unregistered_name_falls_back(self):
        with self.assertLogs('wikiboot.core.component_factory', level='WARNING'):
            component = self._factory({VERSIONS_CONTROLLER: "git"}).create_component(
                VERSIONS_CONTROLLER, roles.VERSIONS_CONTROLLER, "zip")
        self.assertIsInstance(component, ZipFileVersionsController)

    def test_failing_constructor_falls_back(self):
        with self.assertLogs('wikiboot.core.component_factory', level='WARNING') as logs:
            component = self._factory({VERSIONS_CONTROLLER: "broken"}).create_component(
                VERSIONS_CONTROLLER, roles.VERSIONS_CONTROLLER, "zip")
        self.assertIsInstance(component, ZipFileVersionsController)
        self.assertIn("cannot build", logs.output[0])

    def test_constructor_may_take_the_configuration(self):
        factory = self._factory({VERSIONS_CONTROLLER: "configured"})
        component = factory.create_component(VERSIONS_CONTROLLER, roles.VERSIONS_CONTROLLER, "zip")
        self.assertIs(component.config, factory.config)

    def test_optional_configuration_parameter_receives_the_configuration(self):
        self.registry.register(roles.VERSIONS_CONTROLLER, "optional", OptionallyConfiguredComponent)
        factory = self._factory({VERSIONS_CONTROLLER: "optional"})
        component = factory.create_component(VERSIONS_CONTROLLER, roles.VERSIONS_CONTROLLER, "zip")
        self.assertIs(component.config, factory.config)

    def test_type_error_inside_constructor_is_reported(self):
        self.registry.register(roles.VERSIONS_CONTROLLER, "misconfigured", MisconfiguredComponent)
        factory = self._factory({VERSIONS_CONTROLLER: "misconfigured"})

        with self.assertRaises(ComponentError) as raised:
            factory.create(roles.VERSIONS_CONTROLLER, "misconfigured")
        self.assertIn("NoneType", str(raised.exception))

        with self.assertLogs('wikiboot.core.component_factory', level='WARNING') as logs:
            component = factory.create_component(VERSIONS_CONTROLLER, roles.VERSIONS_CONTROLLER, "zip")
        self.assertIsInstance(component, ZipFileVersionsController)
        self.assertIn("NoneType", logs.output[0])


class TestPluginDiscovery(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.plugin_dir = os.path.join(self.temp_dir, "plugins")
        os.makedirs(os.path.join(self.plugin_dir, "history"))
        with open(os.path.join(self.plugin_dir, "wikiboot_history_plugin.py"), 'w') as f:
            f.write(textwrap.dedent("""
                class KeepForeverVersionsController:
                    def set_history_depth(self, days):
                        self.history_depth = days
            """))
        with open(os.path.join(self.plugin_dir, "history", "plugin_meta.yaml"), 'w') as f:
            f.write(textwrap.dedent("""
                components:
                  keep_forever:
                    role: versions_controller
                    module: wikiboot_history_plugin
                    class: KeepForeverVersionsController
                  incomplete:
                    role: versions_controller
                    module: wikiboot_history_plugin
                  wrong_role:
                    role: storage_engine
                    module: wikiboot_history_plugin
                    class: KeepForeverVersionsController
            """))

    def tearDown(self):
        resolved = os.path.realpath(self.plugin_dir)
        sys.path[:] = [p for p in sys.path if os.path.realpath(p) != resolved]
        sys.modules.pop("wikiboot_history_plugin", None)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_discover_skips_invalid_entries(self):
        with self.assertLogs('wikiboot.core.discovery', level='WARNING') as logs:
            discovered = PluginDiscovery([self.plugin_dir]).discover()

        self.assertEqual(list(discovered), ["keep_forever"])
        self.assertEqual(discovered["keep_forever"]["role"], roles.VERSIONS_CONTROLLER)
        self.assertEqual(len(logs.output), 2)

    def test_discovered_component_is_constructible(self):
        registry = default_registry()
        count = PluginDiscovery([self.plugin_dir]).register_plugins(registry)

        self.assertEqual(count, 1)
        factory = ComponentFactory(MergedConfiguration({VERSIONS_CONTROLLER: "keep_forever"}), registry)
        component = factory.create_component(VERSIONS_CONTROLLER, roles.VERSIONS_CONTROLLER, "zip")
        self.assertEqual(type(component).__name__, "KeepForeverVersionsController")

    def test_missing_directory_is_ignored(self):
        registry = ComponentRegistry()
        count = PluginDiscovery([os.path.join(self.temp_dir, "absent")]).register_plugins(registry)
        self.assertEqual(count, 0)

    def test_unreadable_meta_file_is_reported(self):
        with open(os.path.join(self.plugin_dir, "plugin_meta.yaml"), 'w') as f:
            f.write("components: [unclosed\n")
        with self.assertLogs('wikiboot.core.discovery', level='ERROR'):
            discovered = PluginDiscovery([self.plugin_dir]).discover()
        self.assertIn("keep_forever", discovered)


if __name__ == "__main__":
    unittest.main()
