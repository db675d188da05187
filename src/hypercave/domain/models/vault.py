from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Dict, Iterator, Optional, Union

from .resource import ResourceMetadata, SelectedNft


ZERO = Decimal("0")
# Enough digits for 18-decimal amounts with large whole parts.
BALANCE_PRECISION = 60


class CaveOperation(Enum):
    """What the user is doing with the vault."""
    IN = "in"        # deposit into the NFT's vault
    OUT = "out"      # withdraw from the NFT's vault
    LOOK = "look"    # read-only balance query


@dataclass(frozen=True)
class ResourceMove:
    """One resource line of an IN/OUT transaction."""
    resource_address: str
    amount: Union[Decimal, str]
    symbol: str = ""
    icon_url: Optional[str] = None

    @property
    def amount_decimal(self) -> Decimal:
        return to_decimal(self.amount)


def to_decimal(value: Union[Decimal, str, int]) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid decimal amount: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid decimal amount: {value!r}")
    return result


def format_decimal(value: Decimal) -> str:
    """Plain (non-exponent) decimal string without trailing zeros."""
    if value == ZERO:
        return "0"
    return format(value.normalize(), "f")


@dataclass
class VaultBalanceSnapshot:
    """
    Last previewed vault balances for ``nft``, keyed by resource address.

    ``None`` means the vault has no record for that resource, which is not the
    same as a real ``"0"`` balance.
    """

    nft: Optional[SelectedNft] = None
    balances: Dict[str, Optional[str]] = field(default_factory=dict)
    metadata: Dict[str, ResourceMetadata] = field(default_factory=dict)

    def get(self, resource_address: str) -> Optional[str]:
        return self.balances.get(resource_address)

    def is_known(self, resource_address: str) -> bool:
        return self.balances.get(resource_address) is not None

    def describes(self, nft: SelectedNft) -> bool:
        return self.nft is not None and self.nft == nft

    def apply_delta(self, resource_address: str, delta: Decimal) -> Optional[str]:
        """
        Shift a known balance by ``delta``, clamped at zero.

        Unknown balances are left alone and None is returned.
        """
        current = self.balances.get(resource_address)
        if current is None:
            return None
        with localcontext() as ctx:
            ctx.prec = BALANCE_PRECISION
            new_balance = max(ZERO, to_decimal(current) + delta)
            self.balances[resource_address] = format_decimal(new_balance)
        return self.balances[resource_address]

    def __iter__(self) -> Iterator[str]:
        return iter(self.balances)

    def __len__(self) -> int:
        return len(self.balances)
