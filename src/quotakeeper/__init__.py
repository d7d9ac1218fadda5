"""Usage quota tracking and scheduled reset service."""
