"""Contracts package.

This package defines the *public* wire contract of the feed: the single
`{"contracts": [...], "quotes": [...]}` message shape and the ordering rules a
client can rely on when reconciling state.
"""
