"""Client configuration read from the environment."""

from dataclasses import dataclass, field
from typing import Final, final

from decouple import config

_DEFAULT_API_URL: Final = 'http://localhost:8000'
_DEFAULT_TIMEOUT_SECONDS: Final = 30.0


@final
@dataclass(frozen=True)
class ClientConfig:
    """Connection settings of the resource service."""

    base_url: str = _DEFAULT_API_URL
    timeout: float = _DEFAULT_TIMEOUT_SECONDS
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> 'ClientConfig':
        """Build the configuration from ``RESOURCES_API_*`` variables.

        Returns:
            ClientConfig with values from the environment or ``.env``.
        """
        return cls(
            base_url=config('RESOURCES_API_URL', default=_DEFAULT_API_URL),
            timeout=config(
                'RESOURCES_API_TIMEOUT',
                cast=float,
                default=_DEFAULT_TIMEOUT_SECONDS,
            ),
        )
