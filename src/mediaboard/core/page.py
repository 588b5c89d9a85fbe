"""
Page collaborator.

Extensions answer display requests by pushing blocks of opaque markup onto
a page; the page keeps them ordered by position for whatever renders it.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class Block:
    """A fragment of markup destined for one section of a page."""
    header: Optional[str]
    body: str
    section: str = "main"
    position: int = 50


class Page:
    """Priority-ordered collection of blocks."""

    def __init__(self, title: str = ""):
        self.title = title
        self._blocks: List[Block] = []

    def add_block(self, block: Block) -> None:
        self._blocks.append(block)

    @property
    def blocks(self) -> List[Block]:
        """Blocks sorted by position; equal positions keep insertion order."""
        return sorted(self._blocks, key=lambda b: b.position)

    def blocks_in(self, section: str) -> List[Block]:
        return [b for b in self.blocks if b.section == section]
