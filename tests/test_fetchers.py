import unittest
import io
import json
import os
import sys
import tempfile
from contextlib import redirect_stderr
from pathlib import Path

import boto3
from botocore.stub import Stubber

sys.path.append(str(Path(__file__).parent.parent / "src"))

from dynamic_config.fetchers import AwsSecretsManagerFetcher, FileSecretFetcher
from dynamic_config.providers.secrets import PollingSecretProvider, SecretsSourceOptions

SECRET_ARN = "arn:aws:secretsmanager:us-east-1:123456789012:secret:app-overrides-AbCdEf"


class TestAwsSecretsManagerFetcher(unittest.TestCase):

    def setUp(self):
        self.client = boto3.client(
            "secretsmanager",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )
        self.stubber = Stubber(self.client)
        self.stubber.activate()

    def tearDown(self):
        self.stubber.deactivate()

    def test_fetch_returns_secret_string(self):
        """Test the secret string is returned as-is"""
        self.stubber.add_response(
            "get_secret_value",
            {"ARN": SECRET_ARN, "Name": "app-overrides", "SecretString": '{"Foo__Bar": "1"}'},
            {"SecretId": SECRET_ARN},
        )
        fetcher = AwsSecretsManagerFetcher(client=self.client)
        self.assertEqual(fetcher.fetch(SECRET_ARN, timeout=5), '{"Foo__Bar": "1"}')
        self.stubber.assert_no_pending_responses()

    def test_binary_secret_returns_none(self):
        """Test secrets without a string value yield None"""
        self.stubber.add_response(
            "get_secret_value",
            {"ARN": SECRET_ARN, "Name": "app-overrides", "SecretBinary": b"\x00\x01"},
            {"SecretId": SECRET_ARN},
        )
        fetcher = AwsSecretsManagerFetcher(client=self.client)
        self.assertIsNone(fetcher.fetch(SECRET_ARN))

    def test_provider_keeps_values_on_client_error(self):
        """Test an AWS error during refresh keeps the previous overrides"""
        self.stubber.add_response(
            "get_secret_value",
            {"ARN": SECRET_ARN, "Name": "app-overrides", "SecretString": '{"Feature__Enabled": "yes"}'},
            {"SecretId": SECRET_ARN},
        )
        self.stubber.add_client_error(
            "get_secret_value",
            service_error_code="ResourceNotFoundException",
            service_message="Secrets Manager can't find the specified secret.",
            http_status_code=400,
        )
        provider = PollingSecretProvider(
            AwsSecretsManagerFetcher(client=self.client),
            SecretsSourceOptions(SECRET_ARN),
            min_refresh_interval=0,
            auto_refresh=False,
        )
        provider.load()
        with redirect_stderr(io.StringIO()):
            provider.load()

        self.assertEqual(provider.try_get("feature:enabled"), (True, "yes"))
        self.assertIn("ResourceNotFoundException", str(provider.last_error))

    def test_client_built_with_timeout(self):
        """Test the lazily built client is bounded by the fetch timeout"""
        fetcher = AwsSecretsManagerFetcher(region_name="eu-west-1")
        client = fetcher._get_client(3)
        self.assertEqual(client.meta.region_name, "eu-west-1")
        self.assertEqual(client.meta.config.connect_timeout, 3)
        self.assertEqual(client.meta.config.read_timeout, 3)
        self.assertIs(fetcher._get_client(3), client)


class TestFileSecretFetcher(unittest.TestCase):

    def setUp(self):
        self.temp_file = tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False)
        json.dump({
            "app": {"Database__Host": "localhost"},
            "raw": '{"Key": "value"}',
        }, self.temp_file)
        self.temp_file.close()
        self.fetcher = FileSecretFetcher(self.temp_file.name)

    def tearDown(self):
        os.unlink(self.temp_file.name)

    def test_object_secret_is_serialized(self):
        """Test object secrets come back as JSON text"""
        self.assertEqual(json.loads(self.fetcher.fetch("app")), {"Database__Host": "localhost"})

    def test_string_secret_is_returned(self):
        """Test string secrets are returned unchanged"""
        self.assertEqual(self.fetcher.fetch("raw"), '{"Key": "value"}')

    def test_missing_secret(self):
        """Test unknown secrets yield None"""
        self.assertIsNone(self.fetcher.fetch("nonexistent"))

    def test_missing_file(self):
        """Test a missing file raises"""
        with self.assertRaises(FileNotFoundError):
            FileSecretFetcher("does/not/exist.json").fetch("app")


if __name__ == '__main__':
    unittest.main()
