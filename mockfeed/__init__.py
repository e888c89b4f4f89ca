"""mockfeed: a per-connection synthetic market-data feed.

Each WebSocket client gets its own contract population, a lifecycle generator
that creates/renames/removes contracts, and a quote generator that streams
price/volume ticks for them.
"""
