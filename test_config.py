"""Tests for configuration loading and the command line entry point."""

import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

from icalfeed.__main__ import main
from icalfeed.config.settings import FeedConfig, load_config
from icalfeed.exceptions import ConfigurationError
from icalfeed.utils.masking import mask_key


class TestLoadConfig(unittest.TestCase):
    """Configuration is read from .env files and the process environment."""

    def test_defaults_without_environment(self):
        with patch.dict("os.environ", {}, clear=True):
            config = load_config()
        self.assertEqual(config.timezone, "Atlantic/Madeira")
        self.assertEqual(config.window_days, 730)
        self.assertFalse(config.has_rest_source)

    def test_env_file_is_overridden_by_process_environment(self):
        with TemporaryDirectory() as tmp:
            env_file = Path(tmp) / ".env"
            env_file.write_text(
                "ICALFEED_TIMEZONE=Europe/London\n"
                "ICALFEED_UID_DOMAIN=file.example\n"
                "SUPABASE_URL=https://db.example.com\n"
                "SUPABASE_SERVICE_ROLE_KEY=abcdefghijkl\n"
            )
            with patch.dict("os.environ", {"ICALFEED_UID_DOMAIN": "env.example"}, clear=True):
                config = load_config(env_file)

        self.assertEqual(config.timezone, "Europe/London")
        self.assertEqual(config.uid_domain, "env.example")
        self.assertTrue(config.has_rest_source)

    def test_invalid_values_raise(self):
        with patch.dict("os.environ", {"ICALFEED_TIMEZONE": "Moon/Base"}, clear=True):
            with self.assertRaises(ConfigurationError):
                load_config()
        with patch.dict("os.environ", {"ICALFEED_WINDOW_DAYS": "two years"}, clear=True):
            with self.assertRaises(ConfigurationError):
                load_config()
        with self.assertRaises(ConfigurationError):
            FeedConfig(window_days=0)

    def test_header_strings_must_be_single_lines(self):
        with patch.dict("os.environ", {"ICALFEED_PRODID": "-//Evil//EN\nX-INJECTED:1"}, clear=True):
            with self.assertRaises(ConfigurationError):
                load_config()
        with self.assertRaises(ConfigurationError):
            FeedConfig(uid_domain="")
        with self.assertRaises(ConfigurationError):
            FeedConfig(refresh_interval="hourly")
        self.assertEqual(FeedConfig(refresh_interval="P1D").refresh_interval, "P1D")

    def test_with_overrides_keeps_other_fields(self):
        config = FeedConfig(uid_domain="a.example").with_overrides(refresh_interval="PT5M")
        self.assertEqual(config.uid_domain, "a.example")
        self.assertEqual(config.refresh_interval, "PT5M")


class TestMaskKey(unittest.TestCase):

    def test_mask_key(self):
        self.assertEqual(mask_key(None), "<empty>")
        self.assertEqual(mask_key("short"), "***")
        self.assertEqual(mask_key("abcdefghijkl"), "abcd...ijkl")
        self.assertEqual(mask_key("abcdefghijkl", visible=2), "ab...kl")
        self.assertEqual(mask_key("  abcdefghijkl\n"), "abcd...ijkl")


class TestRenderCommand(unittest.TestCase):
    """``python -m icalfeed render`` writes a feed from a JSON fixture."""

    FIXTURE = {
        "resources": [{
            "id": "apt-1",
            "title": "Loft",
            "availability": [{"date": "2099-01-01", "status": "blocked"}],
        }]
    }

    def test_render_to_file(self):
        with TemporaryDirectory() as tmp:
            fixture = Path(tmp) / "fixture.json"
            fixture.write_text(json.dumps(self.FIXTURE))
            output = Path(tmp) / "out.ics"
            with patch.dict("os.environ", {"ICALFEED_WINDOW_DAYS": "40000"}, clear=True):
                code = main(["render", str(fixture), "apt-1", "--output", str(output)])
            body = output.read_bytes().decode("utf-8")

        self.assertEqual(code, 0)
        self.assertIn("DTSTART;VALUE=DATE:20990101\r\n", body)
        self.assertIn("SUMMARY:Loft - BLOCKED\r\n", body)

    def test_render_unknown_resource_fails(self):
        with TemporaryDirectory() as tmp:
            fixture = Path(tmp) / "fixture.json"
            fixture.write_text(json.dumps(self.FIXTURE))
            with patch.dict("os.environ", {}, clear=True):
                code = main(["render", str(fixture), "apt-404"])
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
