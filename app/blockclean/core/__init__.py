"""Core cleaner components: configuration, capacity probing and scheduling."""
