"""Document store connection states."""
from enum import Enum


class ConnectionState(str, Enum):
    PENDING = "PENDING"
    CONNECTED = "CONNECTED"
    FAILED = "FAILED"
