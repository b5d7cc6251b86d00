from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .catalog.config import DEFAULT_GATEWAY_CONFIG, GatewayConfig
from .catalog.gateway import InMemoryGateway, RemoteDataGateway
from .catalog.http_gateway import HttpGateway
from .catalog.seed import load_seed
from .inflight import InFlightGuard
from .linking.manager import AssociationManager
from .listing.cache import SnapshotCache
from .ranking.engine import RankAssignmentEngine
from .signals import InvalidationChannel

logger = logging.getLogger(__name__)


@dataclass
class Services:
    gateway: RemoteDataGateway
    channel: InvalidationChannel
    cache: SnapshotCache
    engine: RankAssignmentEngine
    links: AssociationManager


def _default_gateway(config: GatewayConfig) -> RemoteDataGateway:
    if config.remote_enabled:
        logger.info("Using remote gateway at %s", config.public_base_url)
        return HttpGateway(config)
    if config.seed_dir:
        return load_seed(Path(config.seed_dir))
    return InMemoryGateway()


def build_services(
    gateway: RemoteDataGateway | None = None,
    config: GatewayConfig = DEFAULT_GATEWAY_CONFIG,
) -> Services:
    """Wire the core together. The channel is the only thing the components share."""
    gateway = gateway if gateway is not None else _default_gateway(config)
    channel = InvalidationChannel()
    cache = SnapshotCache()
    channel.subscribe(cache.invalidate)
    guard = InFlightGuard()
    return Services(
        gateway=gateway,
        channel=channel,
        cache=cache,
        engine=RankAssignmentEngine(gateway, channel, guard),
        links=AssociationManager(gateway, channel, guard),
    )


_services: Services | None = None


def get_services() -> Services:
    """Return the process-wide services, building them on first call."""
    global _services
    if _services is None:
        _services = build_services()
    return _services


def configure(gateway: RemoteDataGateway | None = None) -> Services:
    """Replace the process-wide services, e.g. with a pre-seeded gateway."""
    global _services
    _services = build_services(gateway)
    return _services
