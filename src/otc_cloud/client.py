"""``OpenTelekomCloudClient``: one account, one region, one session.

Ties the collaborators together: authentication replaces the session
snapshot, selector helpers fill UI containers through ``fill_options`` and
provisioning delegates to ``Provisioner``. Construct it from resource
annotations or from a flat options mapping::

    client = OpenTelekomCloudClient.from_annotations(dispatcher, node.annotations)
    await client.authenticate()
    await client.get_flavors(flavor_select, initial="s3.medium.1")
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Mapping

import structlog

from .errors import ErrorResult, ResponseParseError
from .identity.authenticator import Authenticator
from .identity.session import Session
from .observability import get_logger
from .options.projector import Projection, fill_options
from .protocols import OptionContainer, RequestDispatcher
from .provisioning.lifecycle import ResourceLifecycle
from .provisioning.provisioner import Provisioner, TransitionHook
from .resources import collections
from .resources.client import ResourceClient
from .schemas import ProjectList, parse_model
from .settings import ClientSettings, PollSettings


class OpenTelekomCloudClient:
    """Facade over authentication, selector fetches and provisioning."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        settings: ClientSettings,
        *,
        poll: PollSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_transition: TransitionHook | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.settings = settings
        self.network_id = ''
        self._logger = logger or get_logger(__name__)
        self._session = Session.anonymous(settings.region)

        self._authenticator = Authenticator(dispatcher, logger=self._logger)
        self.resources = ResourceClient(
            dispatcher,
            lambda: self._session,
            identity_endpoint=settings.endpoint,
            logger=self._logger,
        )
        self.provisioner = Provisioner(
            self.resources,
            poll=poll,
            clock=clock,
            sleep=sleep,
            on_transition=on_transition,
            logger=self._logger,
        )

    @classmethod
    def from_annotations(
        cls,
        dispatcher: RequestDispatcher,
        annotations: Mapping[str, str],
        **kwargs: Any,
    ) -> OpenTelekomCloudClient:
        return cls(dispatcher, ClientSettings.from_annotations(annotations), **kwargs)

    @classmethod
    def from_options(
        cls,
        dispatcher: RequestDispatcher,
        options: Mapping[str, Any],
        **kwargs: Any,
    ) -> OpenTelekomCloudClient:
        return cls(dispatcher, ClientSettings.from_options(options), **kwargs)

    # ── Session ──────────────────────────────────────────────────

    @property
    def session(self) -> Session:
        return self._session

    async def authenticate(self) -> Session | ErrorResult:
        """Authenticate; on success the new session replaces the old one whole."""
        result = await self._authenticator.authenticate(self.settings)
        if isinstance(result, Session):
            self._session = result
        return result

    def region_options(self) -> list[dict[str, str]]:
        """Regions advertised for compute in the last catalog, as ``{"id": ...}``."""
        return [{'id': region} for region in self._session.compute_regions]

    async def list_projects(self) -> list[dict[str, Any]] | ErrorResult:
        """Projects the authenticated user can scope to."""
        result = await self.resources.request_identity(f'/users/{self._session.user_id}/projects')
        if isinstance(result, ErrorResult):
            return result
        try:
            parsed = parse_model(ProjectList, result, what='projects')
        except ResponseParseError as exc:
            self._logger.error('projects_parse_failed', error=str(exc))
            return ErrorResult(error=str(exc), kind='parse')
        return [project.model_dump() for project in parsed.projects]

    # ── Selectors ────────────────────────────────────────────────

    async def _fill(
        self,
        value: OptionContainer,
        collection: collections.Collection,
        initial: str | None,
        path: str | None = None,
    ) -> Projection | None:
        return await fill_options(
            value,
            lambda: self.resources.fetch(collection, path),
            collection.field,
            collection.mapper,
            initial,
            logger=self._logger,
        )

    async def get_flavors(self, value: OptionContainer, initial: str | None = None) -> Projection | None:
        return await self._fill(value, collections.FLAVORS, initial)

    async def get_images(self, value: OptionContainer, initial: str | None = None) -> Projection | None:
        return await self._fill(value, collections.IMAGES, initial)

    async def get_key_pairs(self, value: OptionContainer, initial: str | None = None) -> Projection | None:
        return await self._fill(value, collections.KEY_PAIRS, initial)

    async def get_security_groups(self, value: OptionContainer, initial: str | None = None) -> Projection | None:
        return await self._fill(value, collections.SECURITY_GROUPS, initial)

    async def get_floating_ip_pools(self, value: OptionContainer, initial: str | None = None) -> Projection | None:
        return await self._fill(value, collections.FLOATING_IP_POOLS, initial)

    async def get_availability_zones(self, value: OptionContainer, initial: str | None = None) -> Projection | None:
        return await self._fill(value, collections.AVAILABILITY_ZONES, initial)

    async def get_networks(self, value: OptionContainer, initial: str | None = None) -> Projection | None:
        return await self._fill(value, collections.NETWORKS, initial)

    async def get_subnets(
        self,
        value: OptionContainer,
        network_id: str,
        initial: str | None = None,
    ) -> Projection | None:
        """Subnets of ``network_id``; the id is remembered on ``network_id``."""
        self.network_id = network_id
        return await self._fill(
            value,
            collections.SUBNETS,
            initial,
            path=collections.subnets_path(network_id),
        )

    # ── Provisioning ─────────────────────────────────────────────

    async def create_network(self, name: str, cidr: str) -> str:
        return await self.provisioner.create_network(name, cidr)

    async def wait_for_network_ready(self, network_id: str, deadline: float | None = None) -> ResourceLifecycle:
        return await self.provisioner.wait_for_network_ready(network_id, deadline)

    async def create_subnet(self, network_id: str, name: str, cidr: str, gateway_ip: str) -> str:
        return await self.provisioner.create_subnet(network_id, name, cidr, gateway_ip)

    async def wait_for_subnet_ready(self, subnet_id: str, deadline: float | None = None) -> ResourceLifecycle:
        return await self.provisioner.wait_for_subnet_ready(subnet_id, deadline)
