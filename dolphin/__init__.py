"""dolphin-maker: code generator for SolidJS + Hono + sharded SQLite projects."""
__version__ = "0.3.0"
