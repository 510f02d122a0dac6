"""Infrastructure adapters of the order notifier."""
