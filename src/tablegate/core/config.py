"""Typed configuration for identity resolution.

All options live in one frozen dataclass validated at construction. They can
be supplied directly, from a mapping (e.g. a parsed properties/TOML file), or
from ``TABLEGATE_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping

from tablegate.core.errors import ConfigError, InvalidAddress
from tablegate.core.transport import (
    DEFAULT_CONNECT_TIMEOUT,
    SUPPORTED_METHODS,
    normalize_method,
    validate_address,
)

ENV_PREFIX = "TABLEGATE_"

_REQUIRED = (
    "credential_header",
    "authority_url",
    "id_field",
    "display_name_field",
    "allow_list_field",
)


@dataclass(frozen=True)
class AuthConfig:
    """
    Identity resolution settings.

    Attributes:
        credential_header: Inbound request header carrying the bearer credential.
        authority_url: Address of the identity authority.
        id_field: Response key holding the principal id.
        display_name_field: Response key holding the display name.
        allow_list_field: Response key holding the schema -> tables structure.
        authority_method: "GET" or "POST".
        encoding: Character encoding used on the wire.
        connect_timeout: Seconds allowed to connect to the authority.
        query_dialect: sqlglot dialect used to parse queries (None = generic).
    """

    credential_header: str
    authority_url: str
    id_field: str
    display_name_field: str
    allow_list_field: str
    authority_method: str = "POST"
    encoding: str = "utf-8"
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    query_dialect: str | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ConfigError describing every problem found."""
        problems = [f"missing option '{name}'" for name in _REQUIRED if not getattr(self, name)]
        if self.authority_url:
            try:
                validate_address(self.authority_url)
            except InvalidAddress as exc:
                problems.append(str(exc))
        if normalize_method(self.authority_method) not in SUPPORTED_METHODS:
            problems.append(f"authority_method must be GET or POST, got {self.authority_method!r}")
        if not isinstance(self.connect_timeout, (int, float)) or self.connect_timeout <= 0:
            problems.append(f"connect_timeout must be a positive number, got {self.connect_timeout!r}")
        if problems:
            raise ConfigError("Invalid authorization configuration: " + "; ".join(problems))

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> AuthConfig:
        """
        Build a config from a mapping of option name -> value.

        Unknown keys are ignored. ``connect_timeout`` may be given as a string.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in values.items() if k in known and v not in (None, "")}

        missing = [name for name in _REQUIRED if name not in kwargs]
        if missing:
            raise ConfigError(
                "Invalid authorization configuration: "
                + "; ".join(f"missing option '{name}'" for name in missing)
            )

        if "connect_timeout" in kwargs:
            try:
                kwargs["connect_timeout"] = float(kwargs["connect_timeout"])  # type: ignore[arg-type]
            except (TypeError, ValueError) as exc:
                raise ConfigError(
                    f"connect_timeout must be a number, got {kwargs['connect_timeout']!r}"
                ) from exc
        return cls(**kwargs)  # type: ignore[arg-type]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AuthConfig:
        """Build a config from ``TABLEGATE_<OPTION>`` environment variables."""
        env = os.environ if environ is None else environ
        values = {
            f.name: env.get(ENV_PREFIX + f.name.upper())
            for f in fields(cls)
        }
        return cls.from_mapping(values)
