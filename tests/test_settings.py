import unittest
import io
import os
import tempfile
import sys
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch
import yaml

sys.path.append(str(Path(__file__).parent.parent / "src"))

from dynamic_config.config.settings import SETTINGS_PATH_ENV, Settings


class TestSettings(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures"""
        # Create a temporary config file
        self.temp_config = tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False)
        config_data = {
            'refresh': {
                'min_interval_seconds': 30,
                'fetch_timeout_seconds': 5
            },
            'logging': {
                'level': 'DEBUG'
            },
            'flags': {
                'prefix': 'my-app-'
            }
        }
        yaml.dump(config_data, self.temp_config)
        self.temp_config.close()

    def tearDown(self):
        """Clean up"""
        os.unlink(self.temp_config.name)

    def test_load_config(self):
        """Test loading configuration from file"""
        settings = Settings(self.temp_config.name)

        self.assertIn('refresh', settings.config)
        self.assertIn('logging', settings.config)

    def test_get_nested_value(self):
        """Test getting nested configuration values"""
        settings = Settings(self.temp_config.name)

        self.assertEqual(settings.get('refresh.min_interval_seconds'), 30)
        self.assertEqual(settings.get('flags.prefix'), 'my-app-')

    def test_get_with_default(self):
        """Test getting non-existent value with default"""
        settings = Settings(self.temp_config.name)

        self.assertEqual(settings.get('nonexistent.key', 'default_value'), 'default_value')

    def test_get_returns_default_for_partial_path(self):
        """Test that a path through a scalar returns default"""
        settings = Settings(self.temp_config.name)

        # 'logging.level' is a string, not a dict
        self.assertEqual(settings.get('logging.level.subkey', 'default'), 'default')

    def test_path_from_environment(self):
        """Test the settings file can be chosen through the environment"""
        with patch.dict(os.environ, {SETTINGS_PATH_ENV: self.temp_config.name}):
            settings = Settings()

        self.assertEqual(settings.config_path, Path(self.temp_config.name))
        self.assertEqual(settings.get('refresh.fetch_timeout_seconds'), 5)

    def test_missing_default_config_file(self):
        """Test a missing default file is silently empty"""
        with tempfile.TemporaryDirectory() as workdir, patch.dict(os.environ, {}, clear=True):
            cwd = os.getcwd()
            os.chdir(workdir)
            try:
                output = io.StringIO()
                with redirect_stdout(output):
                    settings = Settings()
            finally:
                os.chdir(cwd)

        self.assertEqual(settings.config, {})
        self.assertEqual(output.getvalue(), "")

    def test_missing_explicit_config_file(self):
        """Test handling of a missing file that was asked for"""
        output = io.StringIO()
        with redirect_stdout(output):
            settings = Settings('nonexistent_config.yaml')

        # Should return empty dict without crashing
        self.assertEqual(settings.config, {})
        self.assertIn("Config file not found", output.getvalue())

    def test_invalid_yaml_file(self):
        """Test handling of invalid YAML"""
        temp_invalid = tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False)
        temp_invalid.write('invalid: yaml: content: [[[')
        temp_invalid.close()

        try:
            with redirect_stdout(io.StringIO()):
                settings = Settings(temp_invalid.name)

            # Should return empty dict without crashing
            self.assertEqual(settings.config, {})
        finally:
            os.unlink(temp_invalid.name)

    def test_empty_yaml_file(self):
        """Test an empty file behaves like no settings"""
        temp_empty = tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False)
        temp_empty.close()

        try:
            settings = Settings(temp_empty.name)
            self.assertEqual(settings.get('refresh.min_interval_seconds', 60), 60)
        finally:
            os.unlink(temp_empty.name)


if __name__ == '__main__':
    unittest.main()
