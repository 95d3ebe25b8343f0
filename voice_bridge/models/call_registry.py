"""
Registry of calls currently being bridged.

The registry only maps a connection id to its bridge so the health endpoint can
report how many calls are live. Call state itself stays on each bridge.
"""

from typing import Any, Dict, Optional


class CallRegistry:
    """
    Tracks active bridged calls.

    Each telephony connection registers its bridge on accept and removes it on
    teardown.
    """

    def __init__(self):
        """Initialize an empty dictionary of active calls."""
        self.active_calls: Dict[str, Any] = {}

    def add_call(self, connection_id: str, bridge: Any) -> None:
        """
        Add a call to the registry.

        Args:
            connection_id: Identifier assigned by the bridge when the socket was accepted
            bridge: The bridge instance handling the call
        """
        self.active_calls[connection_id] = bridge

    def get_call(self, connection_id: str) -> Optional[Any]:
        """Return the bridge for a connection, or None if it is not active."""
        return self.active_calls.get(connection_id)

    def remove_call(self, connection_id: str) -> None:
        """Remove a call; unknown ids are ignored."""
        self.active_calls.pop(connection_id, None)

    def __len__(self) -> int:
        return len(self.active_calls)
