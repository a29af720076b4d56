"""Network access for the offline agent."""

from time2eat_offline.net.aiohttp_network import AiohttpNetwork
from time2eat_offline.net.interfaces import Network

__all__ = ["AiohttpNetwork", "Network"]
