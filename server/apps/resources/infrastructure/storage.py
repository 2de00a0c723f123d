"""S3 storage of project resource files."""

import logging
import uuid
from collections.abc import Iterable
from typing import Any, final

from storages.backends.s3 import S3Storage

from server.apps.resources.infrastructure.metadata import storage_key

logger = logging.getLogger(__name__)


@final
class ResourceStorage(S3Storage):
    """S3 storage backend for project resource files.

    Objects are keyed ``<project_id>/<node_id>``, so renaming or moving a
    node never touches storage. Adds to django-storages S3Storage:
    - ``store_file`` writing a new node's content under its key
    - ``discard`` removing objects of deleted or failed nodes
    - Pre-signed download URLs with a per-call expiry
    """

    def store_file(
        self,
        project_id: Any,
        node_id: uuid.UUID,
        content: Any,
    ) -> str:
        """Write the content of a new file node.

        Args:
            project_id: Primary key of the owning project.
            node_id: Id the node row will be created with.
            content: File content (file-like object).

        Returns:
            Storage key the object was written under.

        Raises:
            Exception: If the S3 upload fails.
        """
        key = storage_key(project_id, node_id)
        try:
            saved_name = self.save(key, content)
        except Exception:
            logger.exception('Failed to store resource object: %s', key)
            raise
        logger.info('Stored resource object: %s', saved_name)
        return saved_name

    def discard(self, names: Iterable[str]) -> int:
        """Remove objects whose nodes are gone or were never created.

        Best-effort: a missing object is skipped and a failing delete is
        logged, leaving that object orphaned.

        Args:
            names: Storage keys to remove.

        Returns:
            Number of objects actually removed.
        """
        removed = 0
        for name in names:
            try:
                if not self.exists(name):
                    logger.warning('Resource object already gone: %s', name)
                    continue
                self.delete(name)
            except Exception:
                logger.exception('Orphaned resource object: %s', name)
                continue
            removed += 1
        if removed:
            logger.info('Removed %d resource object(s)', removed)
        return removed

    def download_url(self, name: str, expire: int, filename: str) -> str:
        """Build a pre-signed URL that downloads under the original name.

        Args:
            name: Storage key of the file.
            expire: URL lifetime in seconds.
            filename: Name offered to the browser.

        Returns:
            Signed URL.
        """
        disposition = 'attachment; filename="{0}"'.format(
            filename.replace('"', ''),
        )
        return self.url(
            name,
            parameters={'ResponseContentDisposition': disposition},
            expire=expire,
        )
