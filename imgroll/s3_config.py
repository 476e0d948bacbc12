"""
S3Config - Storage settings for the S3 event handler.
"""

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class S3Config:
    """
    S3 connection settings.

    Credentials left unset fall through to boto3's default chain
    (environment, instance role, Lambda execution role).

    Attributes:
        region: AWS region of the bucket
        endpoint: Optional endpoint override (MinIO, localstack)
        access_key: Optional access key
        secret_key: Optional secret key
        acl: Canned ACL applied to uploaded renditions (None = bucket default)
        verify_ssl: Verify TLS certificates
        public_url_template: Template for public object URLs
    """
    region: Optional[str] = None
    endpoint: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    acl: Optional[str] = None
    verify_ssl: bool = True
    public_url_template: str = "https://{bucket}.s3.dualstack.{region}.amazonaws.com/{key}"

    @classmethod
    def from_env(cls) -> 'S3Config':
        """Create configuration from environment variables."""
        return cls(
            region=os.getenv('S3_REGION') or os.getenv('AWS_REGION'),
            endpoint=os.getenv('S3_ENDPOINT') or None,
            access_key=os.getenv('S3_ACCESS_KEY') or None,
            secret_key=os.getenv('S3_SECRET_KEY') or None,
            acl=os.getenv('S3_ACL') or None,
            verify_ssl=os.getenv('S3_VERIFY_SSL', 'true').lower() not in ('0', 'false', 'no'),
            public_url_template=os.getenv(
                'S3_PUBLIC_URL_TEMPLATE', cls.public_url_template
            ),
        )

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        if bool(self.access_key) != bool(self.secret_key):
            errors.append("S3_ACCESS_KEY and S3_SECRET_KEY must be set together")
        for placeholder in ('{bucket}', '{key}'):
            if placeholder not in self.public_url_template:
                errors.append(f"public_url_template must contain {placeholder}")
        return errors
