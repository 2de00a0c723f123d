"""Django app configuration for resources app."""

from typing import override

from django.apps import AppConfig


class ResourcesConfig(AppConfig):
    """Configuration for resources app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.resources'
    verbose_name = 'Project resources'

    @override
    def ready(self) -> None:
        """Import signal handlers when app is ready."""
        from server.apps.resources import signals  # noqa: F401
