"""Shared fixtures for resources app tests."""

import uuid

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from moto import mock_aws

from resource_tree.models import AccessLevel, Collection, NodeKind
from server.apps.resources.models import Project, ResourceNode

User = get_user_model()


@pytest.fixture
def user(db):
    """Create the project owner.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create a signed-in user outside the project team.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def instructor(db, settings):
    """Create a verified instructor outside the project team.

    Returns:
        User in the instructor group.
    """
    instructor_user = User.objects.create_user(
        username='instructor',
        password='testpass123',
        email='instructor@example.com',
    )
    group, _ = Group.objects.get_or_create(
        name=settings.RESOURCES_INSTRUCTOR_GROUP,
    )
    instructor_user.groups.add(group)
    return instructor_user


@pytest.fixture
def project(user):
    """Create a public project owned by ``user``.

    Returns:
        Project instance.
    """
    return Project.objects.create(
        title='Cell Biology',
        owner=user,
        visibility=Project.Visibility.PUBLIC,
    )


@pytest.fixture
def mock_s3():
    """Mock S3 service with project-resources bucket.

    Yields:
        boto3 S3 resource with project-resources bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket='project-resources')
        yield conn


@pytest.fixture
def make_node(project):
    """Factory of resource rows in the project.

    Files get a storage key but no stored object.

    Returns:
        Function creating a ResourceNode.
    """
    def factory(  # noqa: WPS211
        name: str,
        kind: NodeKind = NodeKind.FILE,
        parent: ResourceNode | None = None,
        access: AccessLevel = AccessLevel.PUBLIC,
        collection: Collection = Collection.FILES,
        **extra,
    ) -> ResourceNode:
        node_id = uuid.uuid4()
        if kind == NodeKind.FILE:
            extra.setdefault('file', f'{project.pk}/{node_id}')
        return ResourceNode.objects.create(
            id=node_id,
            project=project,
            collection=collection,
            parent=parent,
            kind=kind,
            name=name,
            access=access,
            **extra,
        )
    return factory


@pytest.fixture
def make_folder(make_node):
    """Factory of folder rows.

    Returns:
        Function creating a folder ResourceNode.
    """
    def factory(name: str, parent: ResourceNode | None = None, **extra) -> ResourceNode:
        return make_node(name, NodeKind.FOLDER, parent, **extra)
    return factory
