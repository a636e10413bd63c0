"""Connection strategies: each knows one way of reaching Alertmanager.

A strategy either returns a :class:`Connection`, raises :class:`NotApplicable`
when its preconditions are not met, or raises :class:`StrategyFailed` when it
applied but could not finish. The resolver tries them in order.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from alertmanager_mcp.config import DEFAULT_NAMESPACE, Settings
from alertmanager_mcp.connection import cluster
from alertmanager_mcp.connection.cluster import ClusterCredentials, CredentialsUnavailable
from alertmanager_mcp.connection.transport import Connection, insecure_bearer_transport
from alertmanager_mcp.errors import NotApplicable, StrategyFailed

logger = logging.getLogger("alertmanager_mcp.connection")

URL_ENV_VAR = "ALERTMANAGER_URL"

CredentialLoader = Callable[[str], ClusterCredentials]


class TransportStrategy(ABC):
    name: str = ""
    description: str = ""

    @abstractmethod
    def attempt(self, settings: Settings) -> Connection:
        ...


class DirectURLStrategy(TransportStrategy):
    name = "url"
    description = "direct URL (--url / ALERTMANAGER_URL)"

    def attempt(self, settings: Settings) -> Connection:
        url = settings.url.strip()
        if not url:
            raise NotApplicable(f"no --url flag or {URL_ENV_VAR} environment variable set")
        logger.info("Using direct Alertmanager URL: %s", url)
        return Connection(base_url=url, method=self.name)


class _ClusterStrategy(TransportStrategy):
    def __init__(self, loader: CredentialLoader = cluster.load_credentials) -> None:
        self._load = loader

    def _credentials(self, settings: Settings) -> ClusterCredentials:
        try:
            return self._load(settings.kubeconfig)
        except CredentialsUnavailable as exc:
            raise NotApplicable(f"no Kubernetes credentials found ({exc})") from exc

    def _namespace(self, settings: Settings) -> str:
        return cluster.detect_namespace(settings.namespace, DEFAULT_NAMESPACE)

    def _require_token(self, credentials: ClusterCredentials) -> None:
        try:
            token = credentials.bearer_token()
        except OSError as exc:
            raise StrategyFailed(f"reading bearer token file: {exc}") from exc
        if not token:
            raise NotApplicable(f"no bearer token in {credentials.source} credentials")


class ClusterProxyStrategy(_ClusterStrategy):
    name = "proxy"
    description = "Kubernetes API server service proxy"

    def attempt(self, settings: Settings) -> Connection:
        credentials = self._credentials(settings)
        namespace = self._namespace(settings)
        base_url = (
            f"{credentials.host}/api/v1/namespaces/{namespace}/services/"
            f"{settings.service_scheme}:{settings.service}:{settings.service_port}/proxy"
        )
        try:
            transport = credentials.api_transport()
        except (OSError, ValueError) as exc:
            raise StrategyFailed(f"kubernetes transport: {exc}") from exc

        logger.info(
            "Kubernetes cluster detected (%s), connecting via API proxy: %s/%s:%s:%s",
            credentials.source, namespace, settings.service_scheme, settings.service, settings.service_port,
        )
        return Connection(base_url=base_url, method=self.name, transport=transport)


class ServiceAccountStrategy(_ClusterStrategy):
    """Talks to the service's cluster DNS name directly with the service-account token.

    Meant for pods next to an OpenShift monitoring stack, where Alertmanager sits
    behind kube-rbac-proxy with a certificate from the cluster's internal CA.
    """

    name = "service"
    description = "in-cluster service identity (bearer token, internal service DNS)"

    def attempt(self, settings: Settings) -> Connection:
        credentials = self._credentials(settings)
        self._require_token(credentials)
        namespace = self._namespace(settings)
        base_url = f"https://{settings.service}.{namespace}.svc:{settings.service_port}"
        logger.info("Connecting to Alertmanager service directly: %s", base_url)
        transport = insecure_bearer_transport(credentials.bearer_token)
        return Connection(base_url=base_url, method=self.name, transport=transport)


class RouteStrategy(_ClusterStrategy):
    name = "route"
    description = "OpenShift route discovery"

    def __init__(
        self,
        loader: CredentialLoader = cluster.load_credentials,
        route_lookup: Callable[[ClusterCredentials, str, str], str | None] = cluster.find_route_host,
    ) -> None:
        super().__init__(loader)
        self._lookup = route_lookup

    def attempt(self, settings: Settings) -> Connection:
        credentials = self._credentials(settings)
        self._require_token(credentials)
        namespace = self._namespace(settings)
        host = self._lookup(credentials, namespace, settings.route)
        if not host:
            raise NotApplicable(f"no route {namespace}/{settings.route} with a host")
        base_url = f"https://{host}"
        logger.info("Connecting to Alertmanager via route: %s", base_url)
        transport = insecure_bearer_transport(credentials.bearer_token)
        return Connection(base_url=base_url, method=self.name, transport=transport)


STRATEGIES: dict[str, type[TransportStrategy]] = {
    DirectURLStrategy.name: DirectURLStrategy,
    ClusterProxyStrategy.name: ClusterProxyStrategy,
    ServiceAccountStrategy.name: ServiceAccountStrategy,
    RouteStrategy.name: RouteStrategy,
}


def build_strategies(names: list[str]) -> list[TransportStrategy]:
    return [STRATEGIES[name]() for name in names]
