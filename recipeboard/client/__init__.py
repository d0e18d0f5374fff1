from recipeboard.client.api import BoardApi, UrllibTransport
from recipeboard.client.state import BoardStore

__all__ = ["BoardApi", "BoardStore", "UrllibTransport"]
