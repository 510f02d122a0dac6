"""Domain layer of the order notifier."""
