"""
S3Client - Fetches uploads and stores derived renditions.
"""

import logging
from typing import Dict, Optional, Tuple

import boto3
from botocore.config import Config

from .s3_config import S3Config


class S3Client:
    """
    Wrapper for the S3 operations the event handler needs.
    """

    def __init__(self, config: S3Config, logger: Optional[logging.Logger] = None):
        """
        Initialize S3 client.

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(signature_version='s3v4'),
            verify=config.verify_ssl
        )

    def download_object(self, bucket: str, key: str) -> Tuple[bytes, Dict[str, str]]:
        """
        Download an object with its user metadata.

        Returns:
            Tuple of (body, user metadata); boto3 lowercases metadata keys and
            strips the x-amz-meta- prefix
        """
        self.logger.debug(f"Downloading s3://{bucket}/{key}")
        response = self._client.get_object(Bucket=bucket, Key=key)
        return response['Body'].read(), response.get('Metadata', {})

    def upload_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = 'application/octet-stream'
    ) -> None:
        """Upload an object to S3."""
        extra = {'ACL': self.config.acl} if self.config.acl else {}
        self.logger.debug(f"Uploading s3://{bucket}/{key} ({len(data)} bytes, {content_type})")
        self._client.put_object(
            Bucket=bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            **extra
        )

    def object_url(self, bucket: str, key: str, region: Optional[str] = None) -> str:
        """Public URL of an object."""
        return self.config.public_url_template.format(
            bucket=bucket,
            region=region or self.config.region,
            key=key,
        )
