"""Utility modules for NFT Viewer."""
