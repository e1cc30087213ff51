"""
Shared client instances: media storage backend (local disk or R2 via boto3).

Lazily initialized on first access so importing this module is always safe
(even when env vars are missing during tests).
"""
import logging
import threading

import boto3
from botocore.client import Config

from profile_directory import config
from profile_directory.services.pool import ClientPool
from profile_directory.services.storage import LocalStorage, R2Storage

logger = logging.getLogger('profile_directory.extensions')

_storage = None
_storage_lock = threading.Lock()


def _make_r2_client():
    return boto3.client(
        's3',
        endpoint_url=config.R2_ENDPOINT_URL,
        aws_access_key_id=config.R2_ACCESS_KEY_ID,
        aws_secret_access_key=config.R2_SECRET_ACCESS_KEY,
        config=Config(signature_version='s3v4'),
        region_name='auto',
    )


def _close_r2_client(client):
    client.close()


def build_storage():
    """Construct the backend selected by STORAGE_BACKEND."""
    backend = (config.STORAGE_BACKEND or 'local').lower()
    if backend == 'r2':
        if not (config.R2_ACCESS_KEY_ID and config.R2_SECRET_ACCESS_KEY
                and config.R2_ENDPOINT_URL and config.R2_BUCKET_NAME):
            raise RuntimeError("STORAGE_BACKEND=r2 but R2 credentials/bucket are not set")
        pool = ClientPool(
            _make_r2_client,
            max_size=config.STORAGE_POOL_SIZE,
            timeout=config.STORAGE_POOL_TIMEOUT,
            name='r2',
            closer=_close_r2_client,
        )
        logger.info("R2 storage initialized (bucket=%s, pool=%d)",
                    config.R2_BUCKET_NAME, config.STORAGE_POOL_SIZE)
        return R2Storage(
            pool,
            bucket=config.R2_BUCKET_NAME,
            public_prefix=config.STORAGE_PUBLIC_PREFIX,
            base_url=config.R2_PUBLIC_URL or '',
        )

    if backend != 'local':
        logger.warning("Unknown STORAGE_BACKEND %r, falling back to local disk", backend)
    logger.info("Local storage initialized at %s", config.STORAGE_LOCAL_ROOT)
    return LocalStorage(
        config.STORAGE_LOCAL_ROOT,
        public_prefix=config.STORAGE_PUBLIC_PREFIX,
        base_url=config.FILE_SERVER_URL,
    )


def get_storage():
    """Return the process-wide storage backend, building it on first use."""
    global _storage
    if _storage is None:
        with _storage_lock:
            if _storage is None:
                _storage = build_storage()
    return _storage


def set_storage(storage):
    """Swap the process-wide backend (tests, scripts). Returns the previous one."""
    global _storage
    with _storage_lock:
        previous, _storage = _storage, storage
    return previous
