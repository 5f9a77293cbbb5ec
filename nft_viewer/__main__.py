"""Command-line entry point for NFT Viewer."""

from nft_viewer.cli import main

if __name__ == "__main__":
    main()
