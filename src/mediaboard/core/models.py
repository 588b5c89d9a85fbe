"""
Image entity and tag helpers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union


def explode_tags(tags: Union[str, Iterable[str], None]) -> List[str]:
    """
    Split a tag string on whitespace, or normalise an iterable of tags.

    Order of first occurrence is kept and duplicates are dropped.
    """
    if tags is None:
        return []
    if isinstance(tags, str):
        candidates = tags.split()
    else:
        candidates = [str(t).strip() for t in tags]

    result: List[str] = []
    for tag in candidates:
        if tag and tag not in result:
            result.append(tag)
    return result


def strip_query(value: Optional[str]) -> str:
    """Drop anything after a '?' (upload names taken from URLs carry query strings)."""
    if not value:
        return ""
    return value.split('?', 1)[0]


def is_content_hash(value: Optional[str]) -> bool:
    """Content hashes are ASCII letters and digits, at least two characters long."""
    return bool(value) and len(value) >= 2 and value.isascii() and value.isalnum()


@dataclass
class Image:
    """
    A stored media item.

    The hash is the content checksum and the primary identity of the file;
    ``id`` is assigned by the image repository when the record is added.
    """
    hash: str = ""
    width: int = 0
    height: int = 0
    filesize: int = 0
    filename: str = ""
    ext: str = ""
    tag_array: List[str] = field(default_factory=list)
    source: Optional[str] = None
    locked: bool = False
    rating: Optional[str] = None
    id: Optional[int] = None

    def get_tag_list(self) -> List[str]:
        return list(self.tag_array)

    def get_image_link(self) -> str:
        return f"/image/{self.id}.{self.ext}"

    def get_thumb_link(self) -> str:
        return f"/thumb/{self.id}.jpg"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'hash': self.hash,
            'width': self.width,
            'height': self.height,
            'filesize': self.filesize,
            'filename': self.filename,
            'ext': self.ext,
            'tags': list(self.tag_array),
            'source': self.source,
            'locked': self.locked,
            'rating': self.rating,
        }
