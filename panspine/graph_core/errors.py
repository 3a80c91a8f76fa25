#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Error taxonomy — fatal construction errors and non-fatal walk diagnostics.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


class PanSpineError(Exception):
    """Base class for all PanSpine errors."""
    pass


class MalformedIdentifier(PanSpineError, ValueError):
    """Raised when a node or edge endpoint does not parse as a signed id."""

    def __init__(self, raw: Any, context: str = "node"):
        self.raw = raw
        self.context = context
        super().__init__(
            f"Malformed {context} identifier {raw!r}: expected '<id><sign>' with sign '+' or '-'"
        )


class MalformedPayload(PanSpineError, ValueError):
    """Raised when a graph payload is not shaped like {node, edge, sequence}."""
    pass


class MissingGraph(PanSpineError, RuntimeError):
    """Raised when analysis is requested before a graph has been loaded."""

    def __init__(self, operation: str = "analysis"):
        self.operation = operation
        super().__init__(f"No graph loaded: call load_data() before {operation}")


class DiagnosticKind(str, Enum):
    """Kinds of non-fatal anomalies recorded on a walk."""
    DISCONNECTED_COMPONENT = "DisconnectedComponentWarning"
    MISSING_EDGE = "MissingEdgeWarning"
    EMPTY_WALK = "EmptyWalkWarning"
    START_NODE_IGNORED = "StartNodeIgnoredWarning"


@dataclass(frozen=True)
class WalkDiagnostic:
    """
    A non-fatal anomaly attached to a walk result.

    Diagnostics are never raised; they travel with the walk so that callers
    can render a partial result and still explain what was skipped.
    """
    kind: DiagnosticKind
    message: str
    assembly_key: Optional[str] = None
    node_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['kind'] = self.kind.value
        return data

# PanSpine v0.1.0
# Any usage is subject to this software's license.
