"""Immutable data model for stream inspection.

// [LAW:one-source-of-truth] Page-size menu and offset domain are validated here only.
// [LAW:one-way-deps] Pure data: no I/O, no widget imports.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Mapping

from stream_viewer.core.errors import InvalidInput, NetworkError
from stream_viewer.core.properties import PropertyBag

PAGE_SIZES: tuple[int, ...] = (10, 25, 50, 100, 200, 500)
DEFAULT_PAGE_SIZE = 100


def validate_page_size(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value not in PAGE_SIZES:
        allowed = ", ".join(str(size) for size in PAGE_SIZES)
        raise InvalidInput(f"page size must be one of {allowed}, got {value!r}")
    return value


def validate_offset(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"offset must be an integer, got {value!r}")
    if value < 0:
        raise InvalidInput(f"offset must be >= 0, got {value}")
    return value


def parse_offset(text: str) -> int:
    """Parse operator input such as ``"1,200"`` or ``" 42 "`` into an offset."""
    cleaned = str(text or "").strip().replace(",", "").replace("_", "")
    if not cleaned.isdigit():
        raise InvalidInput(f"not a valid offset: {text!r}")
    return validate_offset(int(cleaned))


@dataclass(frozen=True)
class StreamRef:
    """Unique address of one stream."""

    connection_id: str
    vhost: str
    name: str

    @property
    def label(self) -> str:
        return f"{self.connection_id}/{self.vhost}/{self.name}"

    @classmethod
    def parse(cls, text: str) -> StreamRef:
        """Parse ``connection/vhost/name``; the vhost may itself be ``/``."""
        raw = str(text or "").strip()
        connection_id, sep, rest = raw.partition("/")
        vhost, sep2, name = rest.rpartition("/")
        if not (sep and sep2 and connection_id and vhost and name):
            raise InvalidInput(f"stream must look like connection/vhost/name, got {text!r}")
        return cls(connection_id=connection_id, vhost=vhost, name=name)

    @classmethod
    def from_wire(cls, raw: Mapping[str, object]) -> StreamRef:
        return cls(
            connection_id=str(raw.get("connection_id", "") or ""),
            vhost=str(raw.get("vhost", "") or "/"),
            name=str(raw.get("name", "") or ""),
        )


@dataclass(frozen=True)
class StreamBounds:
    """Snapshot of a stream's valid offset range and aggregate counts."""

    first_offset: int
    last_offset: int
    message_count: int
    size_bytes: int

    def __post_init__(self):
        if self.message_count > 0 and self.first_offset > self.last_offset:
            raise ValueError(
                f"first_offset {self.first_offset} > last_offset {self.last_offset}"
            )

    @property
    def is_empty(self) -> bool:
        return self.message_count <= 0

    @classmethod
    def from_wire(cls, raw: object) -> StreamBounds:
        if not isinstance(raw, Mapping):
            raise NetworkError("malformed stream stats response")
        try:
            return cls(
                first_offset=int(raw.get("first_offset", 0) or 0),
                last_offset=int(raw.get("last_offset", 0) or 0),
                message_count=int(raw.get("message_count", 0) or 0),
                size_bytes=int(raw.get("size", 0) or 0),
            )
        except (TypeError, ValueError) as e:
            raise NetworkError(f"malformed stream stats response: {e}") from e


@dataclass(frozen=True)
class Window:
    """The displayed offset range: start offset plus page size."""

    start_offset: int
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        validate_offset(self.start_offset)
        validate_page_size(self.page_size)

    @property
    def end_offset(self) -> int:
        """Last offset the window can contain (inclusive)."""
        return self.start_offset + self.page_size - 1


_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(raw: object) -> datetime:
    """Parse an RFC 3339 timestamp; fractions are normalised to microseconds."""
    text = str(raw or "").strip()
    if not text:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _decode_data(raw: object) -> bytes:
    if raw is None:
        return b""
    if isinstance(raw, str):
        return base64.b64decode(raw, validate=True)
    if isinstance(raw, list):
        return bytes(raw)
    raise ValueError(f"unsupported data encoding: {type(raw).__name__}")


@dataclass(frozen=True)
class Message:
    """One message as received from the collaborator; never mutated."""

    offset: int
    timestamp: datetime
    properties: PropertyBag = field(default_factory=PropertyBag)
    data: bytes = b""

    @classmethod
    def from_wire(cls, raw: object) -> Message:
        if not isinstance(raw, Mapping):
            raise NetworkError("malformed message entry")
        try:
            return cls(
                offset=int(raw["offset"]),
                timestamp=parse_timestamp(raw.get("timestamp")),
                properties=PropertyBag.from_wire(raw.get("properties")),
                data=_decode_data(raw.get("data")),
            )
        except (KeyError, TypeError, ValueError, binascii.Error) as e:
            raise NetworkError(f"malformed message entry: {e}") from e


@dataclass(frozen=True)
class Connection:
    id: str
    name: str

    @classmethod
    def from_wire(cls, raw: Mapping[str, object]) -> Connection:
        conn_id = str(raw.get("id", "") or "")
        return cls(id=conn_id, name=str(raw.get("name", "") or conn_id))


@dataclass(frozen=True)
class VHost:
    """A virtual host and the streams it contains."""

    connection_id: str
    name: str
    streams: tuple[StreamRef, ...] = ()

    @classmethod
    def from_wire(cls, raw: Mapping[str, object]) -> VHost:
        connection_id = str(raw.get("connection_id", "") or "")
        name = str(raw.get("name", "") or "/")
        streams = []
        for entry in raw.get("streams") or []:
            if not isinstance(entry, Mapping):
                continue
            ref = StreamRef.from_wire(entry)
            streams.append(
                StreamRef(
                    connection_id=ref.connection_id or connection_id,
                    vhost=ref.vhost if entry.get("vhost") else name,
                    name=ref.name,
                )
            )
        return cls(
            connection_id=connection_id,
            name=name,
            streams=tuple(sorted(streams, key=lambda s: s.name)),
        )
