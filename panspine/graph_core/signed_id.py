#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Signed-Identity Model — parsing and ordering of '<id><sign>' node
identifiers and canonical edge keys.

Node identifiers in pangenome graphs carry an orientation suffix
('1234+', '1234-'). The sign is part of the identity: '1234+' and '1234-'
are distinct graph nodes. SignedId makes that explicit so that equality,
hashing and ordering never depend on string formatting.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Optional, Tuple, Union

from .errors import MalformedIdentifier

_SIGNED_ID_RE = re.compile(r'^(.+?)([+-])$')
_EDGE_KEY_PREFIX = "edge:"


class Sign(str, Enum):
    """Orientation of a segment."""
    FORWARD = "+"
    REVERSE = "-"

    @property
    def rank(self) -> int:
        return 0 if self is Sign.FORWARD else 1

    def flipped(self) -> "Sign":
        return Sign.REVERSE if self is Sign.FORWARD else Sign.FORWARD


class Port(str, Enum):
    """Side of a segment an edge attaches to."""
    START = "START"
    END = "END"


@total_ordering
@dataclass(frozen=True)
class SignedId:
    """
    A node identity: bare id plus orientation.

    Ordering is numeric on the bare id when it is an integer, with
    non-integer ids sorted after all integers; '+' sorts before '-'.
    """
    bare: str
    sign: Sign

    def __post_init__(self):
        if not self.bare:
            raise MalformedIdentifier(f"{self.bare}{self.sign.value}")

    @property
    def numeric_id(self) -> Optional[int]:
        """Bare id as an integer, or None when it is not numeric."""
        try:
            return int(self.bare)
        except ValueError:
            return None

    def sort_key(self) -> Tuple:
        num = self.numeric_id
        if num is not None:
            return (0, num, "", self.sign.rank)
        return (1, 0, self.bare, self.sign.rank)

    def flipped(self) -> "SignedId":
        return SignedId(self.bare, self.sign.flipped())

    def __lt__(self, other):
        if not isinstance(other, SignedId):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        return f"{self.bare}{self.sign.value}"

    def __repr__(self) -> str:
        return f"SignedId('{self}')"


SignedLike = Union[str, SignedId]


def parse_signed_id(raw: SignedLike, context: str = "node") -> SignedId:
    """
    Parse a '<id><sign>' identifier.

    Args:
        raw: Identifier string (e.g. '2918+') or an existing SignedId
        context: What the identifier names, used in the error message

    Returns:
        SignedId

    Raises:
        MalformedIdentifier: if the identifier has no trailing sign or no bare part
    """
    if isinstance(raw, SignedId):
        return raw
    if not isinstance(raw, str):
        raise MalformedIdentifier(raw, context)
    match = _SIGNED_ID_RE.match(raw)
    if not match:
        raise MalformedIdentifier(raw, context)
    return SignedId(match.group(1), Sign(match.group(2)))


def edge_key_of(a: SignedLike, b: SignedLike) -> str:
    """Directed edge key 'edge:<from>:<to>'."""
    return f"{_EDGE_KEY_PREFIX}{a}:{b}"


def edge_key_parts(key: str) -> Tuple[SignedId, SignedId]:
    """Split an edge key back into its (from, to) signed ids."""
    if not key.startswith(_EDGE_KEY_PREFIX):
        raise MalformedIdentifier(key, "edge key")
    parts = key[len(_EDGE_KEY_PREFIX):].split(":")
    if len(parts) != 2:
        raise MalformedIdentifier(key, "edge key")
    return parse_signed_id(parts[0], "edge key"), parse_signed_id(parts[1], "edge key")


def undirected_pair(a: SignedId, b: SignedId) -> Tuple[SignedId, SignedId]:
    """Order-independent identity of an adjacency."""
    return (a, b) if a.sort_key() <= b.sort_key() else (b, a)


def port_for_endpoint(reference: SignedId, node_id: SignedId) -> Port:
    """
    Resolve which side of a node an edge endpoint attaches to.

    The rule is the same for starting and ending endpoints: a reference sign
    equal to the node's own sign attaches at the END of the node, an opposite
    sign attaches at its START.
    """
    return Port.END if reference.sign == node_id.sign else Port.START

# PanSpine v0.1.0
# Any usage is subject to this software's license.
