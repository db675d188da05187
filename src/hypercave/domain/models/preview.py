"""
Typed views over the Gateway's transaction preview response.

Decoding here is shape-tolerant: missing fields become None/empty rather than
raising, so the balance decoder decides what an absent value means.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


SUCCEEDED = "Succeeded"


@dataclass(frozen=True)
class NetworkStatus:
    epoch: int
    round: int

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "NetworkStatus":
        ledger_state = data.get("ledger_state") or {}
        return cls(
            epoch=int(ledger_state["epoch"]),
            round=int(ledger_state.get("round", 0)),
        )


@dataclass(frozen=True)
class ReceiptOutput:
    programmatic_json: Optional[Dict[str, Any]] = None
    hex: Optional[str] = None


@dataclass(frozen=True)
class PreviewReceipt:
    status: Optional[str]
    outputs: Tuple[ReceiptOutput, ...] = ()
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED

    @property
    def last_return_value(self) -> Optional[Dict[str, Any]]:
        """Structured return value of the last manifest instruction, if any."""
        if not self.outputs:
            return None
        return self.outputs[-1].programmatic_json

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "PreviewReceipt":
        if not isinstance(data, dict):
            return cls(status=None)
        outputs: List[ReceiptOutput] = []
        for raw in data.get("output") or []:
            if not isinstance(raw, dict):
                outputs.append(ReceiptOutput())
                continue
            pj = raw.get("programmatic_json")
            outputs.append(
                ReceiptOutput(
                    programmatic_json=pj if isinstance(pj, dict) else None,
                    hex=raw.get("hex"),
                )
            )
        return cls(
            status=data.get("status"),
            outputs=tuple(outputs),
            error_message=data.get("error_message"),
        )


@dataclass(frozen=True)
class PreviewResult:
    receipt: PreviewReceipt
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "PreviewResult":
        return cls(receipt=PreviewReceipt.from_json(data.get("receipt")), raw=data)
