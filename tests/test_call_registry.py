import unittest
from unittest.mock import MagicMock

from voice_bridge.models.call_registry import CallRegistry


class TestCallRegistry(unittest.TestCase):

    def setUp(self):
        self.call_registry = CallRegistry()
        self.bridge = MagicMock()
        self.connection_id = "test-connection-id"

    def test_add_call(self):
        # Execute
        self.call_registry.add_call(self.connection_id, self.bridge)

        # Assert
        self.assertIn(self.connection_id, self.call_registry.active_calls)
        self.assertIs(self.call_registry.active_calls[self.connection_id], self.bridge)
        self.assertEqual(len(self.call_registry), 1)

    def test_get_call(self):
        # Setup
        self.call_registry.add_call(self.connection_id, self.bridge)

        # Execute
        bridge = self.call_registry.get_call(self.connection_id)

        # Assert
        self.assertIs(bridge, self.bridge)

    def test_get_nonexistent_call(self):
        self.assertIsNone(self.call_registry.get_call("nonexistent-id"))

    def test_remove_call(self):
        # Setup
        self.call_registry.add_call(self.connection_id, self.bridge)

        # Execute
        self.call_registry.remove_call(self.connection_id)

        # Assert
        self.assertNotIn(self.connection_id, self.call_registry.active_calls)
        self.assertEqual(len(self.call_registry), 0)

    def test_remove_nonexistent_call(self):
        # Should not raise
        self.call_registry.remove_call("nonexistent-id")
        self.assertEqual(len(self.call_registry), 0)


if __name__ == "__main__":
    unittest.main()
