"""Django storage configuration for S3-compatible backends.

Resource files live in one bucket under ``<project_id>/<node_id>`` keys.
Any S3-compatible service works (AWS S3, MinIO, Cloudflare R2).
"""

from typing import Any, Final

from server.settings.components import config

# S3-compatible storage for resource files, local storage for static files
STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.resources.infrastructure.storage.ResourceStorage',
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='project-resources',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default='testing'),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default='testing'),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            'file_overwrite': True,  # Keys are node ids, never reused
            'default_acl': None,  # Inherit bucket ACL
            'querystring_auth': True,  # Pre-signed download URLs
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
