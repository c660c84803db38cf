"""Gift NFT metadata and supply resolver."""

__version__ = "0.1.0"
