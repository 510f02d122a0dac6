"""Order notifier package.

Relays order lifecycle events to live subscribers and to an email fallback.
"""
