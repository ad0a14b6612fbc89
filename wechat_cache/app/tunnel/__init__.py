"""
SSH tunnel package.

Builds dialers that open stream connections through an SSH gateway so any
client (Redis first of all) can reach hosts only visible from that gateway.

Key points:
- A dial either yields a channel or raises DialError/KeyLoadError; no retries.
- Host key checking stays off unless known_hosts is configured.
- Session pooling is opt-in (OverSSH.pooled).
"""

from .ssh_dialer import (
    Dialer,
    SSHTunnel,
    PooledSSHTunnel,
    TunnelChannel,
    create_tunnel,
    split_address,
)

__all__ = [
    "Dialer",
    "SSHTunnel",
    "PooledSSHTunnel",
    "TunnelChannel",
    "create_tunnel",
    "split_address",
]
