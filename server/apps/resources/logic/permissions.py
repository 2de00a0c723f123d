"""Access policy of project resources."""

import logging

from django.conf import settings
from django.core.exceptions import ValidationError

from resource_tree.models import DisplayAccess
from server.apps.resources.exceptions import (
    AccessDeniedError,
    ProjectNotFoundError,
)
from server.apps.resources.models import Project

logger = logging.getLogger(__name__)

# Levels everyone may see; `mixed` folders always show so that their
# visible contents stay reachable
_BASE_LEVELS = frozenset((DisplayAccess.PUBLIC, DisplayAccess.MIXED))


def get_project(project_id: str, user: object) -> Project:
    """Load a project the user may open.

    Args:
        project_id: Project id from the URL.
        user: Requesting user, possibly anonymous.

    Returns:
        Project instance.

    Raises:
        ProjectNotFoundError: If the id is malformed or unknown.
        AccessDeniedError: If the project is private and the user is not
            on its team.
    """
    try:
        project = Project.objects.get(pk=project_id)
    except (Project.DoesNotExist, ValidationError) as error:
        logger.info('Project not found: %s', project_id)
        raise ProjectNotFoundError() from error

    if project.visibility == Project.Visibility.PRIVATE and not can_manage(
        user,
        project,
    ):
        logger.warning(
            'Denied access to private project %s for %s',
            project_id,
            user,
        )
        raise AccessDeniedError()
    return project


def can_manage(user: object, project: Project) -> bool:
    """Check whether a user may modify the resources of a project.

    Args:
        user: Requesting user, possibly anonymous.
        project: Project to check.

    Returns:
        True for superusers, the owner and team members.
    """
    if getattr(user, 'is_superuser', False):
        return True
    return project.is_team_member(user)


def require_manage(user: object, project: Project) -> None:
    """Raise unless the user may modify the project's resources.

    Raises:
        AccessDeniedError: If the user is not on the project team.
    """
    if not can_manage(user, project):
        logger.warning(
            'User %s may not modify resources of project %s',
            user,
            project.pk,
        )
        raise AccessDeniedError()


def is_instructor(user: object) -> bool:
    """Whether the user belongs to the configured instructor group."""
    if not getattr(user, 'is_authenticated', False):
        return False
    return user.groups.filter(  # type: ignore[attr-defined]
        name=settings.RESOURCES_INSTRUCTOR_GROUP,
    ).exists()


def allowed_levels(user: object, project: Project) -> frozenset[DisplayAccess]:
    """Display access values a user may see in a project.

    Args:
        user: Requesting user, possibly anonymous.
        project: Project being browsed.

    Returns:
        Set of visible display access values.
    """
    if can_manage(user, project):
        return frozenset(DisplayAccess)

    levels = set(_BASE_LEVELS)
    if getattr(user, 'is_authenticated', False):
        levels.add(DisplayAccess.USERS)
        if is_instructor(user):
            levels.add(DisplayAccess.INSTRUCTORS)
    return frozenset(levels)
