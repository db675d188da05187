"""
Non-fungible local ids.

The Gateway reports ids either as canonical strings ("#1#", "<name>", "[beef]",
"{...}") or as objects carrying ``id_type`` and ``simple_rep``. Both are parsed
into one of four variants. Two ids are equal when their canonical text matches.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Type

from ..errors import DecodeError


DISPLAY_MAX_LEN = 24


@dataclass(frozen=True, eq=False)
class NftId:
    simple_rep: str

    kind: ClassVar[str] = ""
    open_delim: ClassVar[str] = ""
    close_delim: ClassVar[str] = ""

    @property
    def canonical(self) -> str:
        return f"{self.open_delim}{self.simple_rep}{self.close_delim}"

    def display(self) -> str:
        """Canonical text, shortened for display when longer than 24 chars."""
        text = self.canonical
        if len(text) > DISPLAY_MAX_LEN:
            return f"{text[:12]}...{text[-8:]}"
        return text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NftId):
            return NotImplemented
        return self.canonical == other.canonical

    def __hash__(self) -> int:
        return hash(self.canonical)

    def __str__(self) -> str:
        return self.canonical

    @staticmethod
    def parse(raw: Any) -> "NftId":
        """Parse a canonical string or a Gateway ``{id_type, simple_rep}`` object."""
        if isinstance(raw, NftId):
            return raw
        if isinstance(raw, str):
            return _parse_canonical(raw)
        if isinstance(raw, dict):
            id_type = raw.get("id_type")
            simple_rep = raw.get("simple_rep")
            variant = _BY_KIND.get(id_type)
            if variant is None or not isinstance(simple_rep, str) or not simple_rep:
                raise DecodeError(f"Unrecognised NFT id object: {raw!r}")
            return variant(simple_rep)
        raise DecodeError(f"Unsupported NFT id type: {type(raw).__name__}")


@dataclass(frozen=True, eq=False)
class IntegerNftId(NftId):
    kind: ClassVar[str] = "Integer"
    open_delim: ClassVar[str] = "#"
    close_delim: ClassVar[str] = "#"


@dataclass(frozen=True, eq=False)
class StringNftId(NftId):
    kind: ClassVar[str] = "String"
    open_delim: ClassVar[str] = "<"
    close_delim: ClassVar[str] = ">"


@dataclass(frozen=True, eq=False)
class BytesNftId(NftId):
    kind: ClassVar[str] = "Bytes"
    open_delim: ClassVar[str] = "["
    close_delim: ClassVar[str] = "]"


@dataclass(frozen=True, eq=False)
class RuidNftId(NftId):
    kind: ClassVar[str] = "RUID"
    open_delim: ClassVar[str] = "{"
    close_delim: ClassVar[str] = "}"


_BY_KIND: Dict[str, Type[NftId]] = {
    v.kind: v for v in (IntegerNftId, StringNftId, BytesNftId, RuidNftId)
}


def _parse_canonical(text: str) -> NftId:
    text = text.strip()
    if len(text) >= 3:
        for variant in _BY_KIND.values():
            if text[0] == variant.open_delim and text[-1] == variant.close_delim:
                return variant(text[1:-1])
    raise DecodeError(f"Unrecognised NFT id: {text!r}")


__all__ = [
    "NftId",
    "IntegerNftId",
    "StringNftId",
    "BytesNftId",
    "RuidNftId",
]
