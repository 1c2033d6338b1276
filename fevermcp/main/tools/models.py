"""Typed views over Fever API responses.

Each client action maps to one response variant.  All variants share the
Fever envelope (``api_version``, ``auth``, ``last_refreshed_on_time``); keys
the variant does not know about are carried in ``extra`` so they survive a
round trip to JSON.  ``to_dict`` leaves out anything the upstream did not
send.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

from fevermcp.main.tools.errors import MalformedResponseError

ENVELOPE_KEYS: Tuple[str, ...] = ("api_version", "auth", "last_refreshed_on_time")
ITEM_KEYS: Tuple[str, ...] = (
    "id", "feed_id", "title", "author", "html", "url",
    "is_saved", "is_read", "created_on_time",
)


def _opt_int(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MalformedResponseError(f"Invalid API response: {name} is not numeric")


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass
class ItemSummary:
    id: str
    title: Optional[str] = None
    url: Optional[str] = None
    created_on_time: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(asdict(self))


@dataclass
class Item:
    id: str
    feed_id: Optional[int] = None
    title: Optional[str] = None
    author: Optional[str] = None
    html: Optional[str] = None
    url: Optional[str] = None
    is_saved: Optional[int] = None
    is_read: Optional[int] = None
    created_on_time: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> "Item":
        """Parse one upstream item record.

        Unknown keys, and known keys sent as ``null``, go to ``extra`` so
        ``to_dict`` reproduces them.
        """
        if not isinstance(raw, dict) or raw.get("id") is None:
            raise MalformedResponseError("Invalid API response: item without id")
        return cls(
            id=str(raw["id"]),
            feed_id=_opt_int(raw.get("feed_id"), "feed_id"),
            title=raw.get("title"),
            author=raw.get("author"),
            html=raw.get("html"),
            url=raw.get("url"),
            is_saved=_opt_int(raw.get("is_saved"), "is_saved"),
            is_read=_opt_int(raw.get("is_read"), "is_read"),
            created_on_time=_opt_int(raw.get("created_on_time"), "created_on_time"),
            extra={
                key: value for key, value in raw.items()
                if key not in ITEM_KEYS or value is None
            },
        )

    @property
    def unread(self) -> bool:
        return self.is_read == 0

    def summary(self) -> ItemSummary:
        return ItemSummary(
            id=self.id,
            title=self.title,
            url=self.url,
            created_on_time=self.created_on_time,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = _drop_none({key: getattr(self, key) for key in ITEM_KEYS})
        out.update(self.extra)
        return out


@dataclass
class FeverResponse:
    """Bare Fever envelope; also the result of the ``mark`` actions."""

    api_version: Any
    auth: Optional[int] = None
    last_refreshed_on_time: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    payload_keys: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        known = set(ENVELOPE_KEYS) | set(cls.payload_keys)
        return cls(
            api_version=data["api_version"],
            auth=_opt_int(data.get("auth"), "auth"),
            last_refreshed_on_time=_opt_int(
                data.get("last_refreshed_on_time"), "last_refreshed_on_time"
            ),
            extra={key: value for key, value in data.items() if key not in known},
            **cls._parse_payload(data),
        )

    @classmethod
    def _parse_payload(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    def _envelope(self) -> Dict[str, Any]:
        return {
            "api_version": self.api_version,
            "auth": self.auth,
            "last_refreshed_on_time": self.last_refreshed_on_time,
            "extra": dict(self.extra),
        }

    def _payload_dict(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        out = _drop_none({
            "api_version": self.api_version,
            "auth": self.auth,
            "last_refreshed_on_time": self.last_refreshed_on_time,
        })
        out.update(self.extra)
        out.update(_drop_none(self._payload_dict()))
        return out


@dataclass
class SubscriptionsResponse(FeverResponse):
    feeds: Optional[List[Any]] = None
    feeds_groups: Optional[List[Any]] = None

    payload_keys: ClassVar[Tuple[str, ...]] = ("feeds", "feeds_groups")

    @classmethod
    def _parse_payload(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"feeds": data.get("feeds"), "feeds_groups": data.get("feeds_groups")}

    def _payload_dict(self) -> Dict[str, Any]:
        return {"feeds": self.feeds, "feeds_groups": self.feeds_groups}


@dataclass
class GroupsResponse(FeverResponse):
    groups: Optional[List[Any]] = None
    feeds_groups: Optional[List[Any]] = None

    payload_keys: ClassVar[Tuple[str, ...]] = ("groups", "feeds_groups")

    @classmethod
    def _parse_payload(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"groups": data.get("groups"), "feeds_groups": data.get("feeds_groups")}

    def _payload_dict(self) -> Dict[str, Any]:
        return {"groups": self.groups, "feeds_groups": self.feeds_groups}


@dataclass
class SummariesResponse(FeverResponse):
    items: Optional[List[ItemSummary]] = None
    total_items: Optional[int] = None

    payload_keys: ClassVar[Tuple[str, ...]] = ("items", "total_items")

    def _payload_dict(self) -> Dict[str, Any]:
        items = None if self.items is None else [i.to_dict() for i in self.items]
        return {"items": items, "total_items": self.total_items}


@dataclass
class ItemsResponse(FeverResponse):
    items: Optional[List[Item]] = None
    total_items: Optional[int] = None

    payload_keys: ClassVar[Tuple[str, ...]] = ("items", "total_items")

    @classmethod
    def _parse_payload(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        raw_items = data.get("items")
        if raw_items is not None and not isinstance(raw_items, list):
            raise MalformedResponseError("Invalid API response: items is not a list")
        items = None if raw_items is None else [Item.from_dict(r) for r in raw_items]
        return {
            "items": items,
            "total_items": _opt_int(data.get("total_items"), "total_items"),
        }

    def _payload_dict(self) -> Dict[str, Any]:
        items = None if self.items is None else [i.to_dict() for i in self.items]
        return {"items": items, "total_items": self.total_items}

    def summarize(
        self, keep: Optional[Callable[[Item], bool]] = None
    ) -> SummariesResponse:
        """Project items to summaries, optionally keeping only those matching *keep*.

        ``total_items`` is replaced by the number of summaries returned.  A
        response without an ``items`` list is passed through untouched.
        """
        if self.items is None:
            return SummariesResponse(total_items=self.total_items, **self._envelope())
        summaries = [i.summary() for i in self.items if keep is None or keep(i)]
        return SummariesResponse(
            items=summaries, total_items=len(summaries), **self._envelope()
        )
