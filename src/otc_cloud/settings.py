"""Client configuration.

``ClientSettings`` is the single configuration object accepted by
``OpenTelekomCloudClient``. It is a plain frozen dataclass so tests can build
it directly; the ``from_*`` factories cover the three ways callers hand us
credentials (resource annotations, a flat options mapping, the process
environment).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Mapping

ANNOTATION_PREFIX = 'opentelekomcloud.cattle.io'

_DEFAULT_RANCHER_URL = 'http://localhost:8080'
_DEFAULT_PROXY_TIMEOUT = 30.0

# Wire/annotation field name -> dataclass attribute.
_FIELD_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        'endpoint': 'endpoint',
        'domainName': 'domain_name',
        'username': 'username',
        'password': 'password',
        'projectName': 'project_name',
        'projectDomainName': 'project_domain_name',
        'projectId': 'project_id',
        'region': 'region',
    }
)


@dataclass(frozen=True, slots=True)
class ClientSettings:
    """Credentials, scope and region for one OTC account."""

    endpoint: str = ''
    """Identity endpoint, e.g. https://iam.eu-de.otc.t-systems.com/v3."""

    domain_name: str = ''
    username: str = ''
    password: str = ''
    """Never log this."""

    project_name: str = ''
    """When set the token is project scoped, otherwise domain scoped."""

    project_domain_name: str = ''
    project_id: str = ''
    region: str = ''
    """Operator-selected region; fixed for the lifetime of the client."""

    def validate(self) -> list[str]:
        """Return a list of configuration errors. Empty means valid."""
        errors: list[str] = []
        for name in ('endpoint', 'domain_name', 'username', 'password', 'region'):
            if not getattr(self, name):
                errors.append(f'{name} is required')
        if self.project_domain_name and not self.project_name:
            errors.append('project_domain_name requires project_name')
        return errors

    @classmethod
    def from_annotations(cls, annotations: Mapping[str, str]) -> ClientSettings:
        """Build settings from ``opentelekomcloud.cattle.io/<field>`` annotations.

        Keys outside the namespace, keys with extra path segments and unknown
        fields are ignored.
        """
        values: dict[str, str] = {}
        for key, value in annotations.items():
            parts = key.split('/')
            if len(parts) != 2 or parts[0] != ANNOTATION_PREFIX:
                continue
            attr = _FIELD_ALIASES.get(parts[1])
            if attr is not None:
                values[attr] = '' if value is None else str(value)
        return cls(**values)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> ClientSettings:
        """Copy a flat options mapping (camelCase or snake_case keys)."""
        known = {f.name for f in fields(cls)}
        values: dict[str, str] = {}
        for key, value in options.items():
            attr = _FIELD_ALIASES.get(key, key)
            if attr in known and value is not None:
                values[attr] = str(value)
        return cls(**values)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ClientSettings:
        """Build settings from ``OTC_*`` environment variables."""
        if env is None:
            env = dict(os.environ)
        return cls(
            endpoint=env.get('OTC_AUTH_URL', ''),
            domain_name=env.get('OTC_DOMAIN_NAME', ''),
            username=env.get('OTC_USERNAME', ''),
            password=env.get('OTC_PASSWORD', ''),
            project_name=env.get('OTC_PROJECT_NAME', ''),
            project_domain_name=env.get('OTC_PROJECT_DOMAIN_NAME', ''),
            project_id=env.get('OTC_PROJECT_ID', ''),
            region=env.get('OTC_REGION', ''),
        )


@dataclass(frozen=True, slots=True)
class ProxySettings:
    """Where the proxy ingress lives and how to talk to it."""

    rancher_url: str = _DEFAULT_RANCHER_URL
    api_token: str = ''
    """Bearer token for the ingress itself (not the OTC token)."""

    timeout_seconds: float = _DEFAULT_PROXY_TIMEOUT
    verify_tls: bool = True

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ProxySettings:
        if env is None:
            env = dict(os.environ)
        return cls(
            rancher_url=env.get('RANCHER_URL', _DEFAULT_RANCHER_URL).rstrip('/'),
            api_token=env.get('RANCHER_TOKEN', ''),
            timeout_seconds=float(env.get('RANCHER_TIMEOUT_SECONDS', _DEFAULT_PROXY_TIMEOUT)),
            verify_tls=env.get('RANCHER_VERIFY_TLS', 'true').lower() in ('1', 'true', 'yes'),
        )


@dataclass(frozen=True, slots=True)
class PollSettings:
    """Fixed-interval status polling used by the provisioning waits."""

    interval_seconds: float = 1.0
    timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        if self.interval_seconds <= 0:
            raise ValueError('interval_seconds must be > 0')
        if self.timeout_seconds < 0:
            raise ValueError('timeout_seconds must be >= 0')
