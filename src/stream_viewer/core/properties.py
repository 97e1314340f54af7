"""Structural partition of AMQP 1.0 message properties.

The collaborator returns one flat mapping per message: the standard
properties and header fields as top-level keys, plus four nested mappings
for the remaining sections. The partition is driven by key position only,
never by inspecting values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

logger = logging.getLogger(__name__)

# [LAW:one-source-of-truth] Fixed key set of the "standard" section.
STANDARD_KEYS: tuple[str, ...] = (
    "message_id",
    "correlation_id",
    "content_type",
    "content_encoding",
    "reply_to",
    "subject",
    "to",
    "user_id",
    "group_id",
    "reply_to_group_id",
    "group_sequence",
    "creation_time",
    "absolute_expiry_time",
    "durable",
    "priority",
    "ttl",
    "first_acquirer",
    "delivery_count",
    "routing_key",
)

# Section name -> wire key of the nested mapping it comes from.
NESTED_SECTIONS: dict[str, str] = {
    "application": "application_properties",
    "message_annotations": "message_annotations",
    "delivery_annotations": "delivery_annotations",
    "footer": "footer",
}

SECTION_ORDER: tuple[str, ...] = ("standard", *NESTED_SECTIONS)

SECTION_TITLES: dict[str, str] = {
    "standard": "Properties",
    "application": "Application Properties",
    "message_annotations": "Message Annotations",
    "delivery_annotations": "Delivery Annotations",
    "footer": "Footer",
}

_EMPTY: Mapping[str, object] = MappingProxyType({})


def _frozen(values: Mapping[str, object] | None) -> Mapping[str, object]:
    if not values:
        return _EMPTY
    return MappingProxyType({str(k): v for k, v in values.items()})


@dataclass(frozen=True)
class PropertyBag:
    """Five disjoint read-only property sections of one message."""

    standard: Mapping[str, object] = field(default_factory=lambda: _EMPTY)
    application: Mapping[str, object] = field(default_factory=lambda: _EMPTY)
    message_annotations: Mapping[str, object] = field(default_factory=lambda: _EMPTY)
    delivery_annotations: Mapping[str, object] = field(default_factory=lambda: _EMPTY)
    footer: Mapping[str, object] = field(default_factory=lambda: _EMPTY)

    @classmethod
    def from_wire(cls, raw: Mapping[str, object] | None) -> PropertyBag:
        if not isinstance(raw, Mapping):
            return cls()

        standard = {key: raw[key] for key in STANDARD_KEYS if key in raw}
        nested: dict[str, Mapping[str, object] | None] = {}
        for section, wire_key in NESTED_SECTIONS.items():
            value = raw.get(wire_key)
            nested[section] = value if isinstance(value, Mapping) else None

        known = set(STANDARD_KEYS) | set(NESTED_SECTIONS.values())
        dropped = sorted(str(key) for key in raw if key not in known)
        if dropped:
            logger.debug("ignoring unpartitioned property keys: %s", ", ".join(dropped))

        return cls(standard=_frozen(standard), **{k: _frozen(v) for k, v in nested.items()})

    def section(self, name: str) -> Mapping[str, object]:
        if name not in SECTION_ORDER:
            raise KeyError(name)
        return getattr(self, name)

    def sections(self) -> list[tuple[str, Mapping[str, object]]]:
        """Non-empty sections in display order."""
        return [(name, self.section(name)) for name in SECTION_ORDER if self.section(name)]

    @property
    def message_id(self) -> str | None:
        value = self.standard.get("message_id")
        return None if value is None else str(value)

    @property
    def routing_key(self) -> str | None:
        value = self.standard.get("routing_key") or self.standard.get("subject")
        return None if value is None else str(value)

    def to_dict(self) -> dict[str, object]:
        """Wire-shaped plain dict, e.g. for copying all properties."""
        out: dict[str, object] = dict(self.standard)
        for section, wire_key in NESTED_SECTIONS.items():
            values = self.section(section)
            if values:
                out[wire_key] = dict(values)
        return out

    def __len__(self) -> int:
        return sum(len(self.section(name)) for name in SECTION_ORDER)
