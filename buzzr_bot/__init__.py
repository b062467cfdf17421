"""Discord bot that relays a guild's announcement channel to SMS subscribers."""

__version__ = "1.0.0"
