"""Application layer of the order notifier."""
