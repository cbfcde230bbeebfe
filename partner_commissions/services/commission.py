"""
Commission calculation service
Handles per-sale commission: max(sale amount * rate, minimum)
"""

from decimal import Decimal
from typing import Any, Iterable, List, Optional

from partner_commissions.models import CommissionResult, CommissionRule, Sale
from partner_commissions.utils.validators import to_money

# Sale amounts shown in the commission preview table
SAMPLE_SALE_AMOUNTS: List[int] = [100, 250, 500, 1000, 2500, 5000, 10000]

def calculate_commission(sale_amount: Any, rule: CommissionRule) -> Decimal:
    """
    Calculate commission for a single sale

    The minimum is paid even on a zero-value sale.

    Args:
        sale_amount: Sale amount, finite and non-negative
        rule: Commission rule to apply

    Returns:
        Commission amount as an unrounded Decimal

    Raises:
        InvalidInputError: If sale_amount is negative, non-finite or not numeric
    """
    amount = to_money(sale_amount, "sale amount", stacklevel=2)
    return max(amount * rule.rate_for(amount), rule.minimum)

def calculate(sale: Sale, rule: CommissionRule) -> CommissionResult:
    """Calculate commission for a sale, keeping the detail for reports"""
    amount = to_money(sale.amount, f"sale {sale.reference or '?'} amount", stacklevel=2)
    rate = rule.rate_for(amount)
    by_rate = amount * rate
    return CommissionResult(
        sale_amount=amount,
        commission_amount=max(by_rate, rule.minimum),
        rate=rate,
        minimum_applied=by_rate < rule.minimum,
        reference=sale.reference,
    )

def breakeven_amount(rule: CommissionRule) -> Optional[Decimal]:
    """
    Smallest sale amount whose rate-based commission reaches the minimum

    Below this amount the partner is paid the minimum. Returns None when
    no positive rate exists, since the minimum then always applies.
    """
    brackets = [(Decimal(0), rule.rate)]
    brackets.extend((tier.floor, tier.rate) for tier in rule.tiers)

    for i, (floor, rate) in enumerate(brackets):
        if rate == 0:
            continue
        candidate = max(rule.minimum / rate, floor)
        upper = brackets[i + 1][0] if i + 1 < len(brackets) else None
        if upper is None or candidate < upper:
            return candidate
    return None

def sample_commissions(
    rule: CommissionRule,
    amounts: Iterable[Any] = SAMPLE_SALE_AMOUNTS,
) -> List[CommissionResult]:
    """Commission for each sample amount, for showing a partner their rates"""
    return [calculate(Sale(amount=amount), rule) for amount in amounts]
