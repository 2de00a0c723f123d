"""Signal handlers for resources app."""

import functools
import logging

from django.core.files.storage import default_storage
from django.db import transaction
from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.resources.models import ResourceNode

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=ResourceNode)
def discard_stored_object(
    sender: type[ResourceNode],
    instance: ResourceNode,
    using: str,
    **kwargs: object,
) -> None:
    """Schedule removal of a deleted file node's object.

    Runs for every row of a deleted subtree, since the ORM collects the
    ``parent`` cascade. The object goes only once the delete commits; a
    rolled back delete keeps both the row and its object.

    Args:
        sender: The ResourceNode model class.
        instance: The node being deleted.
        using: Alias of the database the delete ran on.
        **kwargs: Additional signal arguments.
    """
    if instance.is_folder or not instance.file:
        return

    storage_name = instance.file.name
    logger.debug('Object of node %s queued for removal', instance.pk)
    transaction.on_commit(
        functools.partial(default_storage.discard, [storage_name]),
        using=using,
    )
