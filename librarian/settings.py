"""Runtime settings resolved from the process environment.

Settings are read once at start-up and passed explicitly to the components
that need them; nothing else in the package reads environment variables.

Examples
--------
>>> settings = load_settings({"CORE_API_KEY": "secret"})
>>> settings.credential_for("core")
'secret'
"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ

from librarian.logging import get_logger, log_warning

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = get_logger(__name__)

DEFAULT_PROVIDER_TIMEOUT = 8.0
DEFAULT_PAGE_LIMIT = 20
DEFAULT_MAX_LIMIT = 100

#: Environment variable holding each provider's credential.
PROVIDER_CREDENTIAL_VARS: dict[str, str] = {
    "googleBooks": "GOOGLE_BOOKS_API_KEY",
    "core": "CORE_API_KEY",
}


@dc.dataclass(frozen=True, slots=True)
class Settings:
    """Resolved runtime configuration.

    Attributes
    ----------
    database_url : str | None
        SQLAlchemy async database URL.
    log_level : str | None
        Requested femtologging level name.
    provider_timeout : float
        Seconds each external provider call may take before it is abandoned.
    default_limit : int
        Page size used when a search request does not specify one.
    max_limit : int
        Upper bound applied to requested page sizes.
    provider_credentials : dict[str, str]
        Provider name to credential; providers without an entry run
        unauthenticated or are disabled, depending on the provider.
    """

    database_url: str | None = None
    log_level: str | None = None
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    default_limit: int = DEFAULT_PAGE_LIMIT
    max_limit: int = DEFAULT_MAX_LIMIT
    provider_credentials: dict[str, str] = dc.field(default_factory=dict)

    def credential_for(self, provider_name: str) -> str | None:
        """Return the configured credential for ``provider_name``."""
        return self.provider_credentials.get(provider_name)


def _read_positive_number[NumberT: (int, float)](
    env: cabc.Mapping[str, str],
    name: str,
    default: NumberT,
    kind: type[NumberT],
) -> NumberT:
    """Read a positive number, falling back to ``default`` when invalid."""
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = kind(raw.strip())
    except ValueError:
        log_warning(logger, "Ignoring invalid %s=%r; using %s.", name, raw, default)
        return default
    if value <= 0:
        log_warning(
            logger, "Ignoring non-positive %s=%r; using %s.", name, raw, default
        )
        return default
    return value


def _read_credentials(env: cabc.Mapping[str, str]) -> dict[str, str]:
    """Collect non-blank provider credentials."""
    credentials: dict[str, str] = {}
    for provider_name, variable in PROVIDER_CREDENTIAL_VARS.items():
        value = (env.get(variable) or "").strip()
        if value:
            credentials[provider_name] = value
    return credentials


def load_settings(env: cabc.Mapping[str, str] | None = None) -> Settings:
    """Build settings from ``env`` (defaults to ``os.environ``).

    Parameters
    ----------
    env : collections.abc.Mapping[str, str] | None
        Environment mapping to read from.

    Returns
    -------
    Settings
        Resolved settings. Invalid numeric values are replaced by defaults
        and reported as warnings rather than raised.
    """
    source = os.environ if env is None else env
    max_limit = _read_positive_number(
        source, "LIBRARIAN_MAX_LIMIT", DEFAULT_MAX_LIMIT, int
    )
    default_limit = min(
        _read_positive_number(
            source, "LIBRARIAN_DEFAULT_LIMIT", DEFAULT_PAGE_LIMIT, int
        ),
        max_limit,
    )
    return Settings(
        database_url=source.get("DATABASE_URL") or None,
        log_level=source.get("LIBRARIAN_LOG_LEVEL") or None,
        provider_timeout=_read_positive_number(
            source,
            "LIBRARIAN_PROVIDER_TIMEOUT",
            DEFAULT_PROVIDER_TIMEOUT,
            float,
        ),
        default_limit=default_limit,
        max_limit=max_limit,
        provider_credentials=_read_credentials(source),
    )


__all__ = ("PROVIDER_CREDENTIAL_VARS", "Settings", "load_settings")
