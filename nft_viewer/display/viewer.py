"""Key/value tables for collection and token metadata."""

from typing import Iterable, Optional, Tuple

from rich import box
from rich.console import Console
from rich.table import Table

from nft_viewer.models.nft import CollectionMetadata, TokenMetadata


class Viewer:
    """Prints resolved metadata to the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _print_kv(self, rows: Iterable[Tuple[str, str]]) -> None:
        table = Table(show_header=True, header_style="bold", box=box.ASCII)
        table.add_column("Key", style="bold")
        table.add_column("Value", justify="right")
        for key, value in rows:
            table.add_row(key, value)
        self.console.print(table)

    def clear(self) -> None:
        self.console.clear()

    def show_collection(self, collection: CollectionMetadata, address: str) -> None:
        self.console.print("→ Collection", style="bold yellow")
        self._print_kv([
            ("Name", collection.name),
            ("Address", address),
            ("Uri", collection.base_uri),
            ("Symbol", collection.symbol),
            ("Total Supply", str(collection.total_supply)),
        ])

    def show_token(self, token: TokenMetadata) -> None:
        self.console.print()
        self.console.print("→ Single", style="bold green")
        self._print_kv([
            ("Token ID", token.token_id),
            ("Token Uri", token.token_uri),
            ("Image Url", token.image_uri),
        ])

        self.console.print()
        self.console.print("→ Attributes", style="bold blue")
        self._print_kv(token.attribute_pairs)

    def show_image_header(self) -> None:
        self.console.print()
        self.console.print("→ Image", style="bold red")

    def show_progress(self, token_id: int) -> None:
        self.console.print(f"Downloading:  [yellow]{token_id}[/yellow]")
