"""
Account media: numbered photo/video files in each account's storage folder,
plus photo validation for the avatar stored on the account row.

File naming: images take the first free number from 1 (1.jpg, 2.png, ...),
videos the first free number from 200 (200.mp4, 201.mov, ...).
"""
import io
import logging
import os
import posixpath
from typing import Iterable, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from profile_directory.config import IMAGE_EXTENSIONS, VIDEO_EXTENSIONS, VIDEO_NUMBER_START

logger = logging.getLogger('services.media')


def is_image(name: str) -> bool:
    return name.lower().endswith(IMAGE_EXTENSIONS)


def is_video(name: str) -> bool:
    return name.lower().endswith(VIDEO_EXTENSIONS)


def next_free_number(used: set, start: int) -> int:
    """Smallest number >= start not in `used`; the number is reserved in `used`."""
    number = start
    while number in used:
        number += 1
    used.add(number)
    return number


def _used_numbers(names: Iterable[str]) -> set:
    used = set()
    for name in names:
        stem = name.split('.', 1)[0]
        if stem.isdigit():
            used.add(int(stem))
    return used


def account_files(storage, identificator: str) -> List[str]:
    """Public paths of the account's images and videos."""
    return [
        storage.public_path(identificator, name)
        for name in storage.list_files(identificator)
        if is_image(name) or is_video(name)
    ]


def first_photo(storage, identificator: str) -> Optional[str]:
    """Public path of the first image in the account's folder, or None."""
    try:
        names = storage.list_files(identificator)
    except Exception as e:
        logger.warning("Could not list media for %s: %s", identificator, e)
        return None
    for name in names:
        if is_image(name):
            return storage.public_path(identificator, name)
    return None


def sync_account_media(storage, identificator: str,
                       uploads: List[Tuple[str, str]], keep_links: List[str]) -> List[str]:
    """
    Add new uploads and prune everything the editor dropped.

    uploads:     (local temp path, original filename) pairs
    keep_links:  public paths of existing files the editor kept

    Returns the public paths of every file left in the folder.
    """
    storage.create_directory(identificator)
    used = _used_numbers(storage.list_files(identificator))

    uploaded = []
    for local_path, original_name in uploads:
        ext = os.path.splitext(original_name or '')[1].lower()
        start = VIDEO_NUMBER_START if ext in VIDEO_EXTENSIONS else 1
        name = f"{next_free_number(used, start)}{ext}"
        storage.upload_file(local_path, identificator, name)
        uploaded.append(name)

    keep = {posixpath.basename(link) for link in keep_links if isinstance(link, str)}
    keep.update(uploaded)
    for name in storage.list_files(identificator):
        if name not in keep:
            storage.delete_file(f"{identificator}/{name}")
            logger.info("Removed %s/%s", identificator, name)

    return [storage.public_path(identificator, name) for name in storage.list_files(identificator)]


def validate_image(data: bytes) -> str:
    """Return the image format (JPEG, PNG, ...) or raise ValueError."""
    if not data:
        raise ValueError("Пустой файл")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            return img.format
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValueError("Файл не является изображением") from e
