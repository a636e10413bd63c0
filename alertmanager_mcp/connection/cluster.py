"""Kubernetes credential loading and cluster checks used by the connection strategies."""

from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import urllib3
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from alertmanager_mcp.connection.transport import BearerTokenTransport

logger = logging.getLogger("alertmanager_mcp.connection")

SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")
SERVICE_ACCOUNT_TOKEN = SERVICE_ACCOUNT_DIR / "token"
SERVICE_ACCOUNT_NAMESPACE = SERVICE_ACCOUNT_DIR / "namespace"

ROUTE_GROUP = "route.openshift.io"
ROUTE_VERSION = "v1"
ROUTE_PLURAL = "routes"


class CredentialsUnavailable(Exception):
    """No kubeconfig or in-cluster service account could be loaded."""


@dataclass(frozen=True)
class ClusterCredentials:
    """What the Kubernetes client resolved for talking to the API server."""

    host: str
    source: str
    token: str | None = None
    token_file: Path | None = None
    ca_cert: str | None = None
    client_cert: str | None = None
    client_key: str | None = None
    verify: bool = True
    configuration: k8s_client.Configuration | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_configuration(
        cls,
        configuration: k8s_client.Configuration,
        source: str,
        token_file: Path | None = None,
    ) -> ClusterCredentials:
        return cls(
            host=configuration.host.rstrip("/"),
            source=source,
            token=_inline_token(configuration),
            token_file=token_file,
            ca_cert=configuration.ssl_ca_cert or None,
            client_cert=configuration.cert_file or None,
            client_key=configuration.key_file or None,
            verify=bool(configuration.verify_ssl),
            configuration=configuration,
        )

    def bearer_token(self) -> str | None:
        """Current bearer token, re-read on every call.

        The token file wins when set, since the kubelet rotates it in place.
        Otherwise the kubeconfig token is used, refreshed through the client
        configuration's hook (exec plugins, OIDC). Raises OSError if the token
        file can't be read.
        """
        if self.token_file is not None:
            token = self.token_file.read_text().strip()
            if token:
                return token
        if self.configuration is None:
            return self.token
        return _inline_token(self.configuration)

    def ssl_context(self) -> ssl.SSLContext:
        """TLS settings from the kubeconfig. Client certificates are sent even when verification is off."""
        context = ssl.create_default_context(cafile=self.ca_cert if self.verify else None)
        if not self.verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        if self.client_cert and self.client_key:
            context.load_cert_chain(self.client_cert, self.client_key)
        return context

    def api_transport(self) -> httpx.AsyncBaseTransport:
        """Transport that authenticates against the API server the same way kubectl would."""
        transport: httpx.AsyncBaseTransport = httpx.AsyncHTTPTransport(verify=self.ssl_context())
        if self.bearer_token():
            transport = BearerTokenTransport(self.bearer_token, transport)
        return transport


def _inline_token(configuration: k8s_client.Configuration) -> str | None:
    """Bearer token from the client configuration; None for other schemes such as basic auth."""
    value = (configuration.get_api_key_with_prefix("authorization") or "").strip()
    scheme, _, token = value.partition(" ")
    if not token:
        return value or None
    if scheme.lower() == "bearer":
        return token.strip() or None
    return None


def load_credentials(kubeconfig: str = "") -> ClusterCredentials:
    """Load cluster credentials.

    Order: explicit kubeconfig path → in-cluster service account → default
    kubeconfig rules (``KUBECONFIG`` / ``~/.kube/config``).
    """
    configuration = k8s_client.Configuration()
    try:
        if kubeconfig:
            k8s_config.load_kube_config(config_file=kubeconfig, client_configuration=configuration)
            return ClusterCredentials.from_configuration(configuration, source=f"kubeconfig {kubeconfig}")

        try:
            k8s_config.load_incluster_config(client_configuration=configuration)
            return ClusterCredentials.from_configuration(
                configuration, source="in-cluster", token_file=SERVICE_ACCOUNT_TOKEN,
            )
        except ConfigException as exc:
            logger.debug("In-cluster config unavailable: %s", exc)

        k8s_config.load_kube_config(client_configuration=configuration)
        return ClusterCredentials.from_configuration(configuration, source="default kubeconfig")
    except (ConfigException, OSError) as exc:
        raise CredentialsUnavailable(str(exc)) from exc


def detect_namespace(explicit: str, default: str, namespace_file: Path = SERVICE_ACCOUNT_NAMESPACE) -> str:
    """Explicit value → in-cluster service account namespace → default."""
    if explicit:
        return explicit
    try:
        namespace = namespace_file.read_text().strip()
    except OSError:
        return default
    return namespace or default


def find_route_host(credentials: ClusterCredentials, namespace: str, name: str) -> str | None:
    """Return ``spec.host`` of the named OpenShift route, or None if there is no such route."""
    with k8s_client.ApiClient(credentials.configuration) as api_client:
        api = k8s_client.CustomObjectsApi(api_client)
        try:
            route = api.get_namespaced_custom_object(
                ROUTE_GROUP, ROUTE_VERSION, namespace, ROUTE_PLURAL, name,
            )
        except (ApiException, urllib3.exceptions.HTTPError) as exc:
            logger.debug("Route %s/%s not available: %s", namespace, name, exc)
            return None

    host = (route.get("spec") or {}).get("host")
    return host or None


def is_openshift(kubeconfig: str = "", loader=load_credentials) -> bool:
    """True when the cluster serves the route.openshift.io API."""
    try:
        credentials = loader(kubeconfig)
    except CredentialsUnavailable:
        return False

    with k8s_client.ApiClient(credentials.configuration) as api_client:
        api = k8s_client.CustomObjectsApi(api_client)
        try:
            api.list_cluster_custom_object(ROUTE_GROUP, ROUTE_VERSION, ROUTE_PLURAL, limit=1)
        except (ApiException, urllib3.exceptions.HTTPError):
            return False
    return True
