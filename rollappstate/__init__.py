"""In-memory registry of rollapps and their state updates: messages, keeper, queries, genesis and Bech32 addresses."""

__version__ = "0.1.0"