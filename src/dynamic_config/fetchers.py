"""
Secret fetchers: where secret overrides actually come from.
"""
import json
from pathlib import Path
from typing import Optional

from dynamic_config.config.settings import settings
from dynamic_config.utils.logger import logger


class AwsSecretsManagerFetcher:
    """Read secret strings from AWS Secrets Manager"""

    name = "aws-secrets-manager"

    def __init__(self, region_name: Optional[str] = None, profile_name: Optional[str] = None,
                 client=None):
        self.region_name = region_name or settings.get('secrets.region')
        self.profile_name = profile_name
        self._client = client
        self._client_timeout = None

    def _get_client(self, timeout: Optional[float]):
        """Create the boto3 client lazily; rebuilt if the timeout changes"""
        if self._client is not None and (self._client_timeout is None or timeout == self._client_timeout):
            return self._client

        import boto3
        from botocore.config import Config

        session = boto3.Session(profile_name=self.profile_name) if self.profile_name else boto3.Session()
        config = Config(connect_timeout=timeout, read_timeout=timeout) if timeout else None
        self._client = session.client("secretsmanager", region_name=self.region_name, config=config)
        self._client_timeout = timeout
        logger.debug(f"Created Secrets Manager client (region={self.region_name}, timeout={timeout})")
        return self._client

    def fetch(self, secret_id: str, timeout: Optional[float] = None) -> Optional[str]:
        response = self._get_client(timeout).get_secret_value(SecretId=secret_id)
        return response.get("SecretString")


class FileSecretFetcher:
    """Read secrets from a local JSON file, for development and testing"""

    name = "file"

    def __init__(self, file_path: str):
        self.file_path = Path(file_path)

    def fetch(self, secret_id: str, timeout: Optional[float] = None) -> Optional[str]:
        """Return the secret as a JSON string"""
        with open(self.file_path, 'r') as f:
            secrets = json.load(f)

        value = secrets.get(secret_id)
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value)
