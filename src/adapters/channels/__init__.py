"""Concrete channels (one module per tunnel type).

Each channel implements `core.interfaces.channel.Channel`.
"""

from adapters.channels.adb_forward import AdbForwardChannel
from adapters.channels.base import HttpChannel
from adapters.channels.ios_tunnel import IwdpTunnelChannel

__all__ = [
    "AdbForwardChannel",
    "HttpChannel",
    "IwdpTunnelChannel",
]
