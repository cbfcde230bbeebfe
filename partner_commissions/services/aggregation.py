"""
Commission aggregation service
Folds sales into report totals, optionally grouped by partner, month or status
"""

import datetime
import logging
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Tuple, Union

from partner_commissions.errors import InvalidInputError
from partner_commissions.models import (
    AggregateReport,
    CommissionResult,
    CommissionRule,
    LeadStatus,
    PayoutStatus,
    Sale,
)
from partner_commissions.services.commission import calculate

logger = logging.getLogger(__name__)

GroupBy = Callable[[Sale], Hashable]


class Period(Enum):
    """Date ranges offered by the partner dashboard"""

    ALL = "all"
    WEEK = "week"
    MONTH = "month"
    LAST_MONTH = "last-month"
    YEAR = "year"


def aggregate(
    sales: Iterable[Sale],
    rule: CommissionRule,
    group_by: Optional[GroupBy] = None,
) -> AggregateReport:
    """
    Build commission totals for a collection of sales

    Every sale is validated before any total is built: the first invalid
    sale aborts the whole aggregation, so a report never covers only part
    of its input.

    Args:
        sales: Sales to include; not modified
        rule: Commission rule applied to every sale
        group_by: Optional key function; groups keep first-occurrence order

    Returns:
        AggregateReport, with one nested report per key when group_by is given

    Raises:
        InvalidInputError: If any sale amount is invalid
    """
    sales = list(sales)
    try:
        results = [calculate(sale, rule) for sale in sales]
    except InvalidInputError as e:
        logger.warning(f"Aggregation of {len(sales)} sales aborted: {e}")
        raise

    pairs = list(zip(sales, results))
    report = _build_report(pairs, group_by)
    logger.debug(
        f"Aggregated {report.count} sales: "
        f"sales={report.total_sales_amount} "
        f"commission={report.total_commission_amount} "
        f"groups={len(report.by_group)}"
    )
    return report

def calculate_total_commission(sales: Iterable[Sale], rule: CommissionRule) -> Decimal:
    """Total commission payable for a collection of sales"""
    return aggregate(sales, rule).total_commission_amount

def _build_report(
    pairs: List[Tuple[Sale, CommissionResult]],
    group_by: Optional[GroupBy],
) -> AggregateReport:
    total_sales = sum((result.sale_amount for _, result in pairs), Decimal(0))
    total_commission = sum(
        (result.commission_amount for _, result in pairs), Decimal(0)
    )

    by_group: Dict[Hashable, AggregateReport] = {}
    if group_by is not None:
        buckets: Dict[Hashable, List[Tuple[Sale, CommissionResult]]] = {}
        for sale, result in pairs:
            buckets.setdefault(group_by(sale), []).append((sale, result))
        by_group = {key: _build_report(bucket, None) for key, bucket in buckets.items()}

    return AggregateReport(
        total_sales_amount=total_sales,
        total_commission_amount=total_commission,
        count=len(pairs),
        by_group=by_group,
    )

# Group key functions

def by_partner(sale: Sale) -> Optional[str]:
    return sale.partner_id

def by_month(sale: Sale) -> Optional[str]:
    """Month bucket such as "2024-03"; None for undated sales"""
    sale_date = _sale_date(sale)
    if sale_date is None:
        return None
    return sale_date.strftime("%Y-%m")

def by_payout_status(sale: Sale) -> PayoutStatus:
    return sale.payout_status

def _sale_date(sale: Sale) -> Optional[datetime.date]:
    # datetime is a date subclass but does not compare with plain dates
    if isinstance(sale.date, datetime.datetime):
        return sale.date.date()
    return sale.date

def filter_sales(
    sales: Iterable[Sale],
    period: Period = Period.ALL,
    payout_status: Optional[Union[PayoutStatus, str]] = None,
    today: Optional[datetime.date] = None,
) -> List[Sale]:
    """
    Select the sales shown for a dashboard period and payout status

    Periods start at the beginning of the current week (Monday), month or
    year; LAST_MONTH covers the whole previous calendar month. Undated
    sales only appear under Period.ALL. Period and status may be given as
    the dashboard's strings ("last-month", "paid"); status "all" means no
    status filter. Timestamps are compared by their calendar date.
    """
    try:
        period = Period(period)
    except ValueError:
        raise InvalidInputError(f"Unsupported period: {period!r}")
    if payout_status == "all":
        payout_status = None
    if payout_status is not None:
        try:
            payout_status = PayoutStatus(payout_status)
        except ValueError:
            raise InvalidInputError(f"Unsupported payout status: {payout_status!r}")
    if today is None:
        today = datetime.date.today()
    elif isinstance(today, datetime.datetime):
        today = today.date()
    start, end = _period_bounds(period, today)

    selected = []
    for sale in sales:
        if payout_status is not None and sale.payout_status != payout_status:
            continue
        if start is not None:
            sale_date = _sale_date(sale)
            if sale_date is None or sale_date < start:
                continue
            if end is not None and sale_date >= end:
                continue
        selected.append(sale)
    return selected

def _period_bounds(
    period: Period, today: datetime.date
) -> Tuple[Optional[datetime.date], Optional[datetime.date]]:
    start_of_month = today.replace(day=1)

    if period == Period.ALL:
        return None, None
    if period == Period.WEEK:
        return today - datetime.timedelta(days=today.weekday()), None
    if period == Period.MONTH:
        return start_of_month, None
    if period == Period.LAST_MONTH:
        last_day = start_of_month - datetime.timedelta(days=1)
        return last_day.replace(day=1), start_of_month
    # Period.YEAR
    return today.replace(month=1, day=1), None

def count_lead_statuses(statuses: Iterable) -> Dict[LeadStatus, int]:
    """
    Count leads per status for the dashboard breakdown

    Every status is present in the result, in lifecycle order.

    Raises:
        InvalidInputError: If a status is not a known LeadStatus
    """
    counts = {status: 0 for status in LeadStatus}
    for value in statuses:
        counts[LeadStatus.parse(value)] += 1
    return counts
