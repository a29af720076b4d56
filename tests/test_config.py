import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from time2eat_offline.config import ConfigLoadRequest, YamlConfigLoader

MINIMAL_CONFIG = """
logging:
  level: DEBUG
  file:
    path: ""
    rotation:
      backup_count: 1
agent:
  version: "3.1.0"
  origin: https://time2eat.test
  static_manifest:
    - /
    - /offline.html
  dynamic:
    path_prefixes:
      - /api/
"""


class YamlConfigLoaderTests(unittest.IsolatedAsyncioTestCase):
    def write_config(self, tmp: str, text: str = MINIMAL_CONFIG) -> Path:
        path = Path(tmp) / "agent.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    async def test_loads_yaml_with_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_config(tmp)

            config = await YamlConfigLoader().load(ConfigLoadRequest(yaml_path=str(path), dotenv_path=None))

        self.assertEqual(config.agent.static_cache_name, "time2eat-static-v3.1.0")
        self.assertEqual(config.agent.dynamic_cache_name, "time2eat-dynamic-v3.1.0")
        self.assertEqual(list(config.agent.dynamic.path_prefixes), ["/api/"])
        self.assertEqual(list(config.agent.dynamic.catalog_patterns), ["/api/menu/", "/api/restaurants/"])
        self.assertEqual(config.agent.endpoints.orders, "/api/orders")
        self.assertEqual(config.sync.max_attempts, 3)
        self.assertEqual(config.notifications.title, "Time2Eat")

    async def test_environment_overrides_known_keys(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_config(tmp)
            with mock.patch.dict(os.environ, {"T2E__AGENT__VERSION": "3.2.0"}):
                config = await YamlConfigLoader().load(ConfigLoadRequest(yaml_path=str(path), dotenv_path=None))

        self.assertEqual(config.agent.version, "3.2.0")

    async def test_environment_override_of_unknown_key_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_config(tmp)
            with mock.patch.dict(os.environ, {"T2E__AGENT__NOT_A_KEY": "x"}):
                with self.assertRaises(KeyError):
                    await YamlConfigLoader().load(ConfigLoadRequest(yaml_path=str(path), dotenv_path=None))

    async def test_environment_override_replaces_manifest_list(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_config(tmp)
            overrides = {"T2E__AGENT__STATIC_MANIFEST": "[/, /offline.html, /public/js/app.js]"}
            with mock.patch.dict(os.environ, overrides):
                config = await YamlConfigLoader().load(ConfigLoadRequest(yaml_path=str(path), dotenv_path=None))

        self.assertEqual(list(config.agent.static_manifest), ["/", "/offline.html", "/public/js/app.js"])

    async def test_scalar_override_for_list_key_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_config(tmp)
            with mock.patch.dict(os.environ, {"T2E__AGENT__STATIC_MANIFEST": "/offline.html"}):
                with self.assertRaises(TypeError):
                    await YamlConfigLoader().load(ConfigLoadRequest(yaml_path=str(path), dotenv_path=None))

    async def test_dotenv_values_feed_overrides(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_config(tmp)
            dotenv_path = Path(tmp) / ".env"
            dotenv_path.write_text("T2E__AGENT__ORIGIN=https://staging.time2eat.test\n", encoding="utf-8")
            with mock.patch.dict(os.environ, {}):
                config = await YamlConfigLoader().load(
                    ConfigLoadRequest(yaml_path=str(path), dotenv_path=str(dotenv_path))
                )

        self.assertEqual(config.agent.origin, "https://staging.time2eat.test")

    async def test_missing_config_is_copied_from_example(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            example = self.write_config(tmp)
            target = Path(tmp) / "data" / "config" / "config.yaml"

            config = await YamlConfigLoader(example_path=example).load(
                ConfigLoadRequest(yaml_path=str(target), dotenv_path=None)
            )

            self.assertTrue(target.exists())
            self.assertTrue((Path(tmp) / "data" / "queue").is_dir())
        self.assertEqual(config.agent.version, "3.1.0")

    async def test_non_mapping_yaml_is_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_config(tmp, "- just\n- a list\n")

            with self.assertRaises(ValueError):
                await YamlConfigLoader().load(ConfigLoadRequest(yaml_path=str(path), dotenv_path=None))


if __name__ == "__main__":
    unittest.main()
