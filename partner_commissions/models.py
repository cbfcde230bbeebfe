"""
Domain models for commission calculation
Rules, sales, per-sale results and aggregate reports
"""

import datetime
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Hashable, Optional, Tuple

from partner_commissions import config
from partner_commissions.errors import InvalidInputError
from partner_commissions.utils.validators import to_money, to_rate


class LeadStatus(Enum):
    """Lifecycle of a referred shop: pending → spoken → closed/rejected"""

    PENDING = "pending"
    SPOKEN = "spoken"
    CLOSED = "closed"
    REJECTED = "rejected"

    @property
    def label(self) -> str:
        return _LEAD_LABELS[self]

    @property
    def is_final(self) -> bool:
        return self in (LeadStatus.CLOSED, LeadStatus.REJECTED)

    @classmethod
    def parse(cls, value: Any) -> "LeadStatus":
        """Convert a stored status string (any case, or the display label)"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            for status in cls:
                if text in (status.value, status.label.lower()):
                    return status
        raise InvalidInputError(f"Unknown lead status: {value!r}")


_LEAD_LABELS = {
    LeadStatus.PENDING: "Pending",
    LeadStatus.SPOKEN: "Spoken To",
    LeadStatus.CLOSED: "Closed",
    LeadStatus.REJECTED: "Rejected",
}


class PayoutStatus(Enum):
    """Payment state of the commission earned on a sale"""

    PENDING = "pending"
    PROCESSING = "processing"
    PAID = "paid"


@dataclass(frozen=True)
class Tier:
    """Rate that applies to sales of at least `floor`"""

    floor: Decimal
    rate: Decimal

    def __post_init__(self):
        object.__setattr__(self, "floor", to_money(self.floor, "tier floor", stacklevel=3))
        object.__setattr__(self, "rate", to_rate(self.rate, "tier rate", stacklevel=3))


@dataclass(frozen=True)
class CommissionRule:
    """
    Commission settings for a partner or shop

    Commission on a sale is max(amount * rate, minimum). With tiers, sales
    reaching a tier floor earn that tier's rate instead of the base rate.
    Tier floors must be positive and strictly increasing, and tier rates
    must never drop below the rate beneath them, so a bigger sale never
    earns less. A rate or minimum left as None is read from config when
    the rule is built.
    """

    rate: Optional[Decimal] = None
    minimum: Optional[Decimal] = None
    tiers: Tuple[Tier, ...] = ()

    def __post_init__(self):
        rate = config.COMMISSION_RATE if self.rate is None else self.rate
        minimum = config.COMMISSION_MIN if self.minimum is None else self.minimum
        object.__setattr__(self, "rate", to_rate(rate, stacklevel=3))
        object.__setattr__(self, "minimum", to_money(minimum, "minimum", stacklevel=3))

        tiers = tuple(
            t if isinstance(t, Tier) else Tier(*t) for t in self.tiers
        )
        previous_floor, previous_rate = Decimal(0), self.rate
        for tier in tiers:
            if tier.floor <= previous_floor:
                raise InvalidInputError(
                    "tier floors must be positive and strictly increasing"
                )
            if tier.rate < previous_rate:
                raise InvalidInputError(
                    f"tier rate {tier.rate} at floor {tier.floor} is lower "
                    f"than the rate below it ({previous_rate})"
                )
            previous_floor, previous_rate = tier.floor, tier.rate
        object.__setattr__(self, "tiers", tiers)

    @classmethod
    def default(cls) -> "CommissionRule":
        """Rule built from COMMISSION_RATE and COMMISSION_MIN"""
        return cls()

    def rate_for(self, amount: Decimal) -> Decimal:
        """Effective rate for a validated sale amount"""
        for tier in reversed(self.tiers):
            if amount >= tier.floor:
                return tier.rate
        return self.rate


@dataclass(frozen=True)
class Sale:
    """A referred sale; only `amount` takes part in commission math"""

    amount: Any
    reference: str = ""
    partner_id: Optional[str] = None
    date: Optional[datetime.date] = None
    payout_status: PayoutStatus = PayoutStatus.PENDING


@dataclass(frozen=True)
class CommissionResult:
    sale_amount: Decimal
    commission_amount: Decimal
    rate: Decimal
    minimum_applied: bool
    reference: str = ""


@dataclass(frozen=True)
class AggregateReport:
    """Totals over a set of sales, optionally split into nested groups"""

    total_sales_amount: Decimal = Decimal(0)
    total_commission_amount: Decimal = Decimal(0)
    count: int = 0
    by_group: Dict[Hashable, "AggregateReport"] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Plain data for statement export; amounts become strings"""
        data: Dict[str, Any] = {
            "total_sales_amount": str(self.total_sales_amount),
            "total_commission_amount": str(self.total_commission_amount),
            "count": self.count,
        }
        if self.by_group:
            data["by_group"] = {
                _group_label(key): report.to_dict()
                for key, report in self.by_group.items()
            }
        return data


def _group_label(key: Hashable) -> str:
    if key is None:
        return "none"
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)
