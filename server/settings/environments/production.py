"""This file contains all the settings used in production.

This file is required and if development.py is present these
values are overridden.
"""

from typing import Final

from server.settings.components import config

DEBUG = False

ALLOWED_HOSTS: Final = [
    config('DOMAIN_NAME'),
]

SECURE_CONTENT_TYPE_NOSNIFF = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
