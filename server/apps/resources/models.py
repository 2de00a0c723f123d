"""Database models for resources app."""

import uuid
from typing import Final, final, override

from django.conf import settings
from django.db import models

from resource_tree.models import AccessLevel, Collection, NodeKind

# Constants for field max lengths
_TITLE_MAX_LENGTH: Final = 255
_NAME_MAX_LENGTH: Final = 100
_MIME_TYPE_MAX_LENGTH: Final = 255
_AUTHOR_MAX_LENGTH: Final = 255
_CHOICE_MAX_LENGTH: Final = 16


def _choices(enum_cls: type[AccessLevel | Collection | NodeKind]) -> list[tuple[str, str]]:
    return [(member.value, member.value.title()) for member in enum_cls]


@final
class Project(models.Model):
    """Project owning the resource collections.

    The owner and team members manage resources; everyone else only
    sees what the access level of each node allows.
    """

    class Visibility(models.TextChoices):
        """Who may open the project at all."""

        PUBLIC = 'public', 'Public'
        PRIVATE = 'private', 'Private'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    title = models.CharField(max_length=_TITLE_MAX_LENGTH)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='owned_projects',
    )

    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name='team_projects',
        blank=True,
    )

    visibility = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=Visibility.choices,
        default=Visibility.PRIVATE,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Project'  # type: ignore[mutable-override]
        verbose_name_plural = 'Projects'  # type: ignore[mutable-override]
        ordering = ['title']

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.title

    def is_team_member(self, user: object) -> bool:
        """Check whether a user owns the project or is on its team.

        Args:
            user: Django user, possibly anonymous.

        Returns:
            True for the owner and team members.
        """
        if not getattr(user, 'is_authenticated', False):
            return False
        if self.owner_id == user.pk:  # type: ignore[attr-defined]
            return True
        return self.members.filter(pk=user.pk).exists()  # type: ignore[attr-defined]


@final
class ResourceNode(models.Model):
    """File or folder of a project collection.

    Nodes form a forest per (project, collection) through ``parent``;
    a null parent means the node sits under the virtual root. Folder
    rows never carry a stored object. File objects live in storage
    under ``<project_id>/<node_id>``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='resources',
    )

    collection = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=_choices(Collection),
        default=Collection.FILES.value,
    )

    # Deleting a folder deletes its subtree
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        related_name='children',
        null=True,
        blank=True,
    )

    kind = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=_choices(NodeKind),
        editable=False,
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    # Persisted access only; `mixed` is derived for display
    access = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=_choices(AccessLevel),
        default=AccessLevel.PUBLIC.value,
    )

    file = models.FileField(
        upload_to='',
        blank=True,
        help_text='Storage key: {project_id}/{node_id}',
    )

    size_bytes = models.BigIntegerField(
        default=0,
        help_text='File size in bytes',
    )

    mime_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        blank=True,
        default='',
    )

    description = models.TextField(blank=True, default='')

    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='uploaded_resources',
        null=True,
        blank=True,
    )

    download_count = models.PositiveIntegerField(default=0)

    # Opaque metadata
    license = models.JSONField(default=dict, blank=True)  # noqa: A003
    author = models.CharField(
        max_length=_AUTHOR_MAX_LENGTH,
        blank=True,
        default='',
    )
    tags = models.JSONField(default=list, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Resource'  # type: ignore[mutable-override]
        verbose_name_plural = 'Resources'  # type: ignore[mutable-override]
        ordering = ['-kind', 'name']  # Folders first

        indexes = [
            # Optimize directory listing queries
            models.Index(
                fields=['project', 'collection', 'parent'],
                name='resources_listing_idx',
            ),
        ]

        constraints = [
            models.CheckConstraint(
                condition=~models.Q(parent=models.F('id')),
                name='resources_not_own_parent',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.project_id}/{self.collection}:{self.name}'

    @property
    def is_folder(self) -> bool:
        """Whether the node is a folder."""
        return self.kind == NodeKind.FOLDER

    @property
    def parent_key(self) -> str:
        """Parent id as exposed on the wire, ``''`` for the root."""
        if self.parent_id is None:
            return ''
        return str(self.parent_id)
