"""Client-side validation of user input."""

from resource_tree.exceptions import ResourceValidationError
from resource_tree.models import NAME_MAX_LENGTH, NAME_MIN_LENGTH


def validate_name(name: str, field: str = 'name') -> str:
    """Check a folder or file name before it is sent.

    Args:
        name: Name typed by the user.
        field: Input the name came from, for error reporting.

    Returns:
        The name, unchanged.

    Raises:
        ResourceValidationError: If the name is not 1-100 characters long.
    """
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ResourceValidationError(
            field,
            f'Name must be between {NAME_MIN_LENGTH} and '
            f'{NAME_MAX_LENGTH} characters.',
        )
    return name
