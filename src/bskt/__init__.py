"""Basket registry and Proof-of-Reserve gated minting service."""

__version__ = "0.1.0"
