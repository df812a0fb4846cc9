"""
Image storage.

Uploads go to an S3-compatible bucket when the S3_* settings are complete,
otherwise to UPLOAD_FOLDER on local disk (served at /static/uploads/). Either
way the caller only gets back the public URL to persist.
"""
import os
import uuid
import logging

import boto3
from botocore.client import Config
from botocore.exceptions import NoCredentialsError, ClientError
from werkzeug.utils import secure_filename

from gladgrade.utils.error_handler import BadRequestError

logger = logging.getLogger(__name__)

LOCAL_URL_PREFIX = '/static/uploads'


def validate_image(file_storage, max_size):
    """Reject missing files, non-image mimetypes and files over max_size bytes."""
    if file_storage is None or not file_storage.filename:
        raise BadRequestError('No image file provided')
    if not (file_storage.mimetype or '').startswith('image/'):
        raise BadRequestError('Only image files are allowed')

    stream = file_storage.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    if size > max_size:
        raise BadRequestError(f'Image exceeds the {max_size // (1024 * 1024)}MB limit')


def _unique_filename(original):
    filename = secure_filename(original or '')
    ext = filename.rsplit('.', 1)[1].lower() if '.' in filename else 'bin'
    return f"image-{uuid.uuid4().hex}.{ext}"


class ImageStorage:
    """Stores uploaded images and returns their public URL."""

    def __init__(self, upload_folder, bucket_name=None, endpoint_url=None, region_name=None,
                 public_domain=None, access_key_id=None, secret_access_key=None):
        self.upload_folder = upload_folder
        self.bucket_name = bucket_name
        self.public_domain = public_domain
        self._s3_client = None
        if all([bucket_name, public_domain, access_key_id, secret_access_key]):
            self._s3_client = boto3.client(
                's3',
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                endpoint_url=endpoint_url,
                region_name=region_name,
                config=Config(s3={'addressing_style': 'virtual'}),
            )

    @classmethod
    def from_config(cls, config):
        return cls(
            upload_folder=config['UPLOAD_FOLDER'],
            bucket_name=config.get('S3_BUCKET_NAME'),
            endpoint_url=config.get('S3_ENDPOINT_URL'),
            region_name=config.get('S3_REGION_NAME'),
            public_domain=config.get('S3_PUBLIC_DOMAIN'),
            access_key_id=config.get('AWS_ACCESS_KEY_ID'),
            secret_access_key=config.get('AWS_SECRET_ACCESS_KEY'),
        )

    @property
    def uses_object_storage(self):
        return self._s3_client is not None

    def save(self, file_storage, object_prefix='images/'):
        """Store the file. Returns the public URL, or None if the upload failed."""
        unique_filename = _unique_filename(file_storage.filename)
        if self._s3_client is None:
            return self._save_local(file_storage, unique_filename)

        object_key = f"{object_prefix}{unique_filename}"
        try:
            self._s3_client.upload_fileobj(
                file_storage,
                self.bucket_name,
                object_key,
                ExtraArgs={'ContentType': file_storage.content_type, 'ACL': 'public-read'},
            )
        except NoCredentialsError:
            logger.error("Object storage credentials not found")
            return None
        except ClientError as e:
            logger.error(f"Object storage upload failed: {e}")
            return None

        file_url = f"{self.public_domain.rstrip('/')}/{object_key}"
        logger.info(f"Image uploaded to object storage: {file_url}")
        return file_url

    def _save_local(self, file_storage, unique_filename):
        os.makedirs(self.upload_folder, exist_ok=True)
        file_path = os.path.join(self.upload_folder, unique_filename)
        try:
            file_storage.save(file_path)
        except OSError as e:
            logger.error(f"Saving image to {file_path} failed: {e}")
            return None
        logger.info(f"Image saved locally: {file_path}")
        return f"{LOCAL_URL_PREFIX}/{unique_filename}"
