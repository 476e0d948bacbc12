"""
S3 event handler - Processes uploads announced by S3 ObjectCreated events.

For each record: download the object, process it, upload the derived
files next to it, point every srcset entry at its public URL and POST
the descriptor to the callback URL stored in the object's user metadata
under "imgroll-cb".
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import unquote_plus

from .callback import CallbackClient
from .config import ProcessingConfig
from .errors import InvalidEventError
from .processor import PhotoProcessor
from .s3_client import S3Client
from .s3_config import S3Config

CALLBACK_METADATA_KEY = 'imgroll-cb'


def parse_record(record: Dict[str, Any]) -> Dict[str, str]:
    """
    Pull bucket, key and region out of one S3 event record.

    Raises:
        InvalidEventError: If any of them is missing
    """
    try:
        bucket = record['s3']['bucket']['name']
        key = unquote_plus(record['s3']['object']['key'])
        region = record['awsRegion']
    except (KeyError, TypeError) as e:
        raise InvalidEventError(f"S3 event record is missing {e}") from e

    if not bucket or not key or not region:
        raise InvalidEventError("S3 event record has an empty bucket, key or region")

    return {'bucket': bucket, 'key': key, 'region': region}


class EventHandler:
    """
    Runs the pipeline for each record of an S3 event.
    """

    def __init__(
        self,
        s3_client: S3Client,
        callback: CallbackClient,
        processor: Optional[PhotoProcessor] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.s3_client = s3_client
        self.callback = callback
        self.logger = logger or logging.getLogger(__name__)
        self.processor = processor or PhotoProcessor(logger=self.logger)

    def handle_record(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Process one record and return the delivered descriptor as a dict."""
        location = parse_record(record)
        bucket, key, region = location['bucket'], location['key'], location['region']
        self.logger.info(f"Handling s3://{bucket}/{key} ({region})")

        data, metadata = self.s3_client.download_object(bucket, key)
        callback_url = metadata.get(CALLBACK_METADATA_KEY)
        if not callback_url:
            raise InvalidEventError(f"s3://{bucket}/{key} has no {CALLBACK_METADATA_KEY} metadata")

        descriptor, files = self.processor.process(data, key)
        descriptor = descriptor.with_url_prefix(
            lambda src: self.s3_client.object_url(bucket, src, region)
        )

        for out in files:
            self.s3_client.upload_object(bucket, out.name, out.data, out.mimetype)
        self.logger.info(f"Uploaded {len(files)} files for {key}")

        self.callback.send(callback_url, descriptor)
        return descriptor.to_dict()

    def handle(self, event: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Process every record of an event, stopping at the first failure."""
        records = event.get('Records') if isinstance(event, dict) else None
        if not records:
            raise InvalidEventError("Event has no Records")

        results = []
        for record in records:
            try:
                results.append(self.handle_record(record))
            except Exception as e:
                self.logger.error(f"Failed to handle record: {e}")
                raise
        return results


def handle_event(
    event: Dict[str, Any],
    context: Any = None,
    s3_client: Optional[S3Client] = None,
    callback: Optional[CallbackClient] = None,
    config: Optional[ProcessingConfig] = None,
    logger: Optional[logging.Logger] = None
) -> List[Dict[str, Any]]:
    """
    Handle an S3 event.

    Args:
        event: S3 notification event
        context: Lambda context (unused)
        s3_client: Storage client (default: built from S3Config.from_env())
        callback: Callback client (default: CallbackClient())
        config: Processing configuration (default: ProcessingConfig.from_env())
        logger: Optional logger instance

    Returns:
        Descriptor dicts, one per record
    """
    logger = logger or logging.getLogger(__name__)

    if s3_client is None:
        s3_config = S3Config.from_env()
        errors = s3_config.validate()
        if errors:
            for error in errors:
                logger.error(error)
            raise ValueError("S3 configuration invalid")
        s3_client = S3Client(s3_config, logger)

    config = config or ProcessingConfig.from_env()
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ValueError("Processing configuration invalid")

    handler = EventHandler(
        s3_client=s3_client,
        callback=callback or CallbackClient(logger=logger),
        processor=PhotoProcessor(config, logger),
        logger=logger,
    )
    return handler.handle(event)


def lambda_handler(event: Dict[str, Any], context: Any) -> List[Dict[str, Any]]:
    """AWS Lambda entry point."""
    logging.getLogger().setLevel(logging.INFO)
    return handle_event(event, context)
