"""Limits and policy of the resource tree service."""

from typing import Final

from server.settings.components import config

# Files accepted by one upload request
RESOURCES_MAX_UPLOAD_FILES: Final = config(
    'RESOURCES_MAX_UPLOAD_FILES',
    cast=int,
    default=20,
)

# Per-file limit, 100 MB
RESOURCES_MAX_UPLOAD_FILE_SIZE: Final = config(
    'RESOURCES_MAX_UPLOAD_FILE_SIZE',
    cast=int,
    default=100 * 1024 * 1024,
)

# Lifetime of pre-signed download URLs in seconds
RESOURCES_DOWNLOAD_URL_EXPIRY: Final = config(
    'RESOURCES_DOWNLOAD_URL_EXPIRY',
    cast=int,
    default=3600,
)

# Members of this group may see `instructors` resources
RESOURCES_INSTRUCTOR_GROUP: Final = config(
    'RESOURCES_INSTRUCTOR_GROUP',
    default='instructors',
)
