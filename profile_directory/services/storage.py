"""
Media storage backends: per-account folders of photos and videos.

Both backends speak in *relative* paths (``"<identificator>"``,
``"<identificator>/3.jpg"``) and hand back *public* paths of the form
``"<public_prefix>/<identificator>/<name>"`` that the frontend can turn into
URLs via get_public_url().

LocalStorage: plain directories under STORAGE_LOCAL_ROOT
R2Storage: S3-compatible bucket (Cloudflare R2) through a ClientPool
"""
import logging
import os
import posixpath
import shutil
from abc import ABC, abstractmethod
from typing import List

from botocore.exceptions import ClientError

logger = logging.getLogger('services.storage')


def _clean_relative(path: str) -> str:
    """Normalize a caller-supplied relative path; '..' segments clamp at the root."""
    rel = posixpath.normpath('/' + (path or '').replace('\\', '/')).lstrip('/')
    return '' if rel == '.' else rel


class StorageBackend(ABC):
    """Capability interface the routes and the importer depend on."""

    def __init__(self, public_prefix: str = '/fileBase', base_url: str = ''):
        self.public_prefix = '/' + public_prefix.strip('/') if public_prefix.strip('/') else ''
        self.base_url = base_url.rstrip('/')

    def public_path(self, *parts: str) -> str:
        return posixpath.join(self.public_prefix or '/', *[_clean_relative(p) for p in parts])

    def get_public_url(self, path: str) -> str:
        """Absolute URL for a public path returned by upload_file()/list."""
        return f"{self.base_url}{path}"

    @abstractmethod
    def create_directory(self, path: str) -> str:
        """Ensure a folder exists; returns the backend-specific location."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    def list_files(self, path: str) -> List[str]:
        """Plain file names directly inside `path`, sorted. Missing folder → []."""

    @abstractmethod
    def upload_file(self, local_path: str, directory: str, name: str) -> str:
        """Copy a local file into `directory/name`; returns its public path."""

    @abstractmethod
    def delete_file(self, path: str) -> None:
        """Remove one file; missing files are ignored."""

    @abstractmethod
    def delete_directory(self, path: str) -> None:
        """Remove a folder and everything in it; missing folders are ignored."""

    def close(self):
        pass


# ── Local disk ───────────────────────────────────────────────────────────────

class LocalStorage(StorageBackend):

    def __init__(self, root: str, public_prefix: str = '/fileBase', base_url: str = ''):
        super().__init__(public_prefix, base_url)
        self.root = os.path.abspath(root)

    def _full(self, path: str) -> str:
        rel = _clean_relative(path)
        if not rel:
            return self.root
        return os.path.join(self.root, *rel.split('/'))

    def create_directory(self, path):
        full = self._full(path)
        os.makedirs(full, exist_ok=True)
        return full

    def exists(self, path):
        return os.path.exists(self._full(path))

    def list_files(self, path):
        full = self._full(path)
        if not os.path.isdir(full):
            return []
        return sorted(
            name for name in os.listdir(full)
            if os.path.isfile(os.path.join(full, name))
        )

    def upload_file(self, local_path, directory, name):
        target_dir = self.create_directory(directory)
        shutil.copyfile(local_path, os.path.join(target_dir, _clean_relative(name)))
        return self.public_path(directory, name)

    def delete_file(self, path):
        full = self._full(path)
        if os.path.isfile(full):
            os.remove(full)

    def delete_directory(self, path):
        full = self._full(path)
        if full == self.root:
            raise ValueError("Refusing to delete the storage root")
        if os.path.isdir(full):
            shutil.rmtree(full)


# ── Cloudflare R2 / S3 ───────────────────────────────────────────────────────

class R2Storage(StorageBackend):
    """
    Folders are emulated with key prefixes plus an empty ``<dir>/`` marker
    object so that freshly provisioned, still-empty folders report exists().
    """

    def __init__(self, pool, bucket: str, public_prefix: str = '/fileBase', base_url: str = ''):
        super().__init__(public_prefix, base_url)
        self.pool = pool
        self.bucket = bucket

    def _key(self, path: str) -> str:
        return self.public_path(path).lstrip('/')

    def _dir_prefix(self, path: str) -> str:
        return self._key(path).rstrip('/') + '/'

    def create_directory(self, path):
        marker = self._dir_prefix(path)
        with self.pool.client() as s3:
            s3.put_object(Bucket=self.bucket, Key=marker, Body=b'')
        return marker

    def exists(self, path):
        key = self._key(path)
        with self.pool.client() as s3:
            try:
                s3.head_object(Bucket=self.bucket, Key=key)
                return True
            except ClientError as e:
                if e.response.get('Error', {}).get('Code') not in ('404', 'NoSuchKey', 'NotFound'):
                    raise
            resp = s3.list_objects_v2(Bucket=self.bucket, Prefix=key.rstrip('/') + '/', MaxKeys=1)
            return resp.get('KeyCount', 0) > 0

    def _iter_keys(self, s3, prefix, delimiter=None):
        kwargs = {'Bucket': self.bucket, 'Prefix': prefix}
        if delimiter:
            kwargs['Delimiter'] = delimiter
        paginator = s3.get_paginator('list_objects_v2')
        for page in paginator.paginate(**kwargs):
            for obj in page.get('Contents', []):
                yield obj['Key']

    def list_files(self, path):
        prefix = self._dir_prefix(path)
        with self.pool.client() as s3:
            names = [
                key[len(prefix):] for key in self._iter_keys(s3, prefix, delimiter='/')
                if key != prefix
            ]
        return sorted(names)

    def upload_file(self, local_path, directory, name):
        public = self.public_path(directory, name)
        with self.pool.client() as s3:
            s3.upload_file(local_path, self.bucket, public.lstrip('/'))
        logger.info("Uploaded %s to R2", public, extra={'storage_path': public})
        return public

    def delete_file(self, path):
        with self.pool.client() as s3:
            s3.delete_object(Bucket=self.bucket, Key=self._key(path))

    def delete_directory(self, path):
        prefix = self._dir_prefix(path)
        if prefix == '/' or prefix == self.public_prefix.lstrip('/') + '/':
            raise ValueError("Refusing to delete the storage root")
        with self.pool.client() as s3:
            keys = list(self._iter_keys(s3, prefix))
            for i in range(0, len(keys), 1000):
                batch = [{'Key': k} for k in keys[i:i + 1000]]
                s3.delete_objects(Bucket=self.bucket, Delete={'Objects': batch, 'Quiet': True})

    def close(self):
        self.pool.close()
