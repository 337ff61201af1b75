from .plantnet_client import PlantNetClient, parse_suggestions

__all__ = ["PlantNetClient", "parse_suggestions"]
