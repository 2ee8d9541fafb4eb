"""File references and payload encoding for file fields.

File fields hold ``FileRef`` objects (or lists of them for ``multiple``
fields). When a form is sent to a remote endpoint each file is read and
turned into a JSON-safe record::

    {"name": "cv.pdf", "mediaType": "application/pdf", "size": 1234,
     "encodedData": "data:application/pdf;base64,JVBERi0..."}

Files are read and encoded concurrently; ``encode_file_fields`` returns
only after every file has been converted.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from forms.models.field import FieldDescriptor

logger = logging.getLogger(__name__)

__all__ = [
    "FileRef",
    "encode_file",
    "encode_file_fields",
    "to_data_url",
]

DEFAULT_MEDIA_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FileRef:
    """Reference to a user-selected file.

    Either ``data`` (in-memory content) or ``path`` (file on disk) must be
    set. Content is only read when the file is encoded.

    Attributes:
        name: File name as presented to the user
        media_type: MIME type (empty when unknown)
        data: In-memory content
        path: Location on disk
    """

    name: str
    media_type: str = ""
    data: Optional[bytes] = None
    path: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.data is None and self.path is None:
            raise ValueError(f"FileRef '{self.name}' needs either data or path")

    @classmethod
    def from_path(cls, path: Union[str, Path], media_type: Optional[str] = None) -> "FileRef":
        """Reference a file on disk, guessing the media type from its name."""
        path = Path(path)
        if media_type is None:
            media_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, media_type=media_type or "", path=path)

    @classmethod
    def from_bytes(cls, name: str, data: bytes, media_type: str = "") -> "FileRef":
        return cls(name=name, media_type=media_type, data=data)

    @property
    def size(self) -> int:
        """Size in bytes."""
        if self.data is not None:
            return len(self.data)
        assert self.path is not None
        return self.path.stat().st_size

    async def read(self) -> bytes:
        """Read the full content without blocking the event loop."""
        if self.data is not None:
            return self.data
        assert self.path is not None
        return await asyncio.to_thread(self.path.read_bytes)


def to_data_url(content: bytes, media_type: str) -> str:
    """Encode content as a base64 ``data:`` URL."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{media_type or DEFAULT_MEDIA_TYPE};base64,{encoded}"


async def encode_file(file: FileRef) -> Dict[str, Any]:
    """Read a file and build its wire record."""
    content = await file.read()
    logger.debug("Encoded file %s (%d bytes)", file.name, len(content))
    return {
        "name": file.name,
        "mediaType": file.media_type,
        "size": len(content),
        "encodedData": to_data_url(content, file.media_type),
    }


async def _encode_value(value: Any) -> Any:
    if isinstance(value, FileRef):
        return await encode_file(value)
    if isinstance(value, (list, tuple)) and value and all(isinstance(v, FileRef) for v in value):
        return list(await asyncio.gather(*(encode_file(v) for v in value)))
    return value


async def encode_file_fields(
    fields: Iterable[FieldDescriptor],
    values: Mapping[str, Any],
) -> Dict[str, Any]:
    """Return a copy of ``values`` with every file field encoded.

    Non-file fields and empty file fields pass through unchanged.
    """
    payload = dict(values)
    file_names: List[str] = [
        f.name for f in fields if f.is_file and payload.get(f.name) not in (None, [], ())
    ]
    if not file_names:
        return payload

    encoded = await asyncio.gather(*(_encode_value(payload[name]) for name in file_names))
    payload.update(zip(file_names, encoded))
    return payload
