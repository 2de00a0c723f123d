"""Management command merging the materials collection into files."""

import logging
from typing import Any, Final

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from resource_tree.models import Collection
from server.apps.resources.logic.tree_operations import (
    merge_materials_into_files,
)
from server.apps.resources.models import Project, ResourceNode

_DEFAULT_FOLDER_NAME: Final = 'Materials'

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Move every project's materials into a folder of its files."""

    help = 'Move project materials into a folder of the project files'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be moved without moving',
        )
        parser.add_argument(
            '--project',
            help='Only migrate the project with this id',
        )
        parser.add_argument(
            '--folder-name',
            default=_DEFAULT_FOLDER_NAME,
            help=f'Folder receiving the materials (default: {_DEFAULT_FOLDER_NAME})',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the migration command.

        Args:
            args: Positional arguments (unused).
            options: Command options.

        Raises:
            CommandError: If ``--project`` does not match a project.
        """
        dry_run = options['dry_run']
        folder_name = options['folder_name']

        projects = Project.objects.filter(
            resources__collection=Collection.MATERIALS,
        ).distinct()
        if options['project']:
            projects = projects.filter(pk=self._project_id(options['project']))

        count = 0
        failed = 0

        for project in projects:
            if dry_run:
                pending = ResourceNode.objects.filter(
                    project=project,
                    collection=Collection.MATERIALS,
                ).count()
                self.stdout.write(
                    f'Would move {pending} materials of {project.title} '
                    f'({project.pk}) into "{folder_name}"',
                )
                count += pending
                continue

            try:
                count += merge_materials_into_files(project, folder_name)
            except Exception:
                failed += 1
                logger.exception(
                    'Failed to migrate materials of project %s',
                    project.pk,
                )

        prefix = 'Would move' if dry_run else 'Moved'
        self.stdout.write(
            self.style.SUCCESS(f'{prefix} {count} materials'),
        )
        if failed:
            self.stdout.write(
                self.style.ERROR(f'Failed to migrate {failed} projects'),
            )

    def _project_id(self, raw: str) -> str:
        try:
            found = Project.objects.filter(pk=raw).exists()
        except ValidationError as error:
            raise CommandError(f'Invalid project id: {raw}') from error
        if not found:
            raise CommandError(f'Project {raw} not found')
        return raw
