from .client import BridgeClient

__all__ = ["BridgeClient"]
