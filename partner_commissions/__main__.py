#!/usr/bin/env python3
"""
Partner Commissions - Commission preview entry point
Prints the commission a partner earns on a range of sale amounts
"""

import logging
import sys
from typing import List

from partner_commissions.config import CURRENCY_CODE, CURRENCY_LOCALE, LOG_LEVEL
from partner_commissions.models import CommissionRule
from partner_commissions.services import commission, currency
from partner_commissions.utils.validators import is_money, normalize_money

logger = logging.getLogger(__name__)

def render_table(rule: CommissionRule, amounts: List[str]) -> str:
    """Render the preview table for the given raw amounts (or the samples)"""
    if amounts:
        results = commission.sample_commissions(rule, [normalize_money(a) for a in amounts])
    else:
        results = commission.sample_commissions(rule)

    def fmt(value):
        return currency.format_currency(value, CURRENCY_CODE, CURRENCY_LOCALE)

    lines = [f"{'Sale':>14}  {'Commission':>14}  Minimum"]
    for result in results:
        flag = "yes" if result.minimum_applied else ""
        lines.append(
            f"{fmt(result.sale_amount):>14}  {fmt(result.commission_amount):>14}  {flag}"
        )
    return "\n".join(lines)

def main(argv: List[str] = None) -> int:
    """Validate arguments and print the preview for the configured rule"""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    args = sys.argv[1:] if argv is None else argv

    invalid = [a for a in args if not is_money(a)]
    if invalid:
        print(f"Invalid sale amount(s): {', '.join(invalid)}", file=sys.stderr)
        return 2

    rule = CommissionRule.default()
    logger.info(f"Commission rule: rate={rule.rate} minimum={rule.minimum}")
    print(render_table(rule, args))
    return 0

if __name__ == "__main__":
    sys.exit(main())
