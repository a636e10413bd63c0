"""Connection resolver: decides once, at startup, how to reach Alertmanager.

Priority: --url flag / ALERTMANAGER_URL → Kubernetes API proxy → error.
Service-identity and route strategies only run when selected explicitly.
"""

from __future__ import annotations

import logging

from alertmanager_mcp.config import Settings
from alertmanager_mcp.connection.strategies import TransportStrategy, build_strategies
from alertmanager_mcp.connection.transport import Connection
from alertmanager_mcp.errors import ConfigurationError, NotApplicable, StrategyFailed

logger = logging.getLogger("alertmanager_mcp.connection")

BINARY_NAME = "mcp-alertmanager"

_REMEDIATION = """\
Configure one of the following:

  # Direct URL (testing/dev)
  {binary} --url http://localhost:9093

  # Environment variable
  ALERTMANAGER_URL=http://alertmanager:9093 {binary}

  # Kubernetes auto-detect with defaults (openshift-monitoring/alertmanager-operated:9093)
  # Requires a valid kubeconfig or in-cluster service account
  {binary}

  # Custom namespace/service
  {binary} --namespace openshift-monitoring --service alertmanager-operated --service-port 9093 --service-scheme https

  # Explicit kubeconfig
  {binary} --kubeconfig /path/to/kubeconfig

  # In-cluster service DNS or OpenShift route (bearer token required)
  {binary} --strategy service
  {binary} --strategy route --route alertmanager-main"""


def resolve_connection(
    settings: Settings,
    strategies: list[TransportStrategy] | None = None,
) -> Connection:
    """Return the first connection a strategy can build, in order.

    Raises ConfigurationError listing every attempted strategy when none applies.
    """
    if strategies is None:
        strategies = build_strategies(settings.strategies)

    attempts: list[tuple[str, str]] = []
    for strategy in strategies:
        try:
            connection = strategy.attempt(settings)
        except NotApplicable as exc:
            logger.debug("Strategy %s not applicable: %s", strategy.name, exc)
            attempts.append((strategy.name, str(exc)))
            continue
        except StrategyFailed as exc:
            logger.warning("Strategy %s failed: %s", strategy.name, exc)
            attempts.append((strategy.name, f"failed: {exc}"))
            continue
        logger.info("Resolved Alertmanager connection via %s: %s", strategy.name, connection.base_url)
        return connection

    raise ConfigurationError(_no_connection_message(strategies, attempts), attempts)


def _no_connection_message(strategies: list[TransportStrategy], attempts: list[tuple[str, str]]) -> str:
    descriptions = {s.name: s.description for s in strategies}
    lines = ["no Alertmanager connection available", "", "Tried:"]
    for name, reason in attempts:
        lines.append(f"  - {name} ({descriptions.get(name, name)}): {reason}")
    if not attempts:
        lines.append("  - nothing (no connection strategies enabled)")
    lines.append("")
    lines.append(_REMEDIATION.format(binary=BINARY_NAME))
    return "\n".join(lines)
