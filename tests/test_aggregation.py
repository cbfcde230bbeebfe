"""
Unit tests for commission aggregation service
Tests for totals, grouping, batch failure, period filters and lead counts
"""

import datetime
import unittest
from decimal import Decimal

from partner_commissions.errors import InvalidInputError
from partner_commissions.models import CommissionRule, LeadStatus, PayoutStatus, Sale
from partner_commissions.services.aggregation import (
    Period,
    aggregate,
    by_month,
    by_partner,
    by_payout_status,
    calculate_total_commission,
    count_lead_statuses,
    filter_sales,
)
from partner_commissions.services.commission import calculate_commission


class TestAggregate(unittest.TestCase):
    """Test cases for report totals and grouping"""

    def setUp(self):
        """Set up the default rule and a mixed batch of sales"""
        self.rule = CommissionRule(rate=Decimal("0.15"), minimum=Decimal("50"))
        self.sales = [
            Sale(amount=Decimal("1000"), reference="S-1", partner_id="p1",
                 date=datetime.date(2024, 1, 5), payout_status=PayoutStatus.PAID),
            Sale(amount=Decimal("100"), reference="S-2", partner_id="p2",
                 date=datetime.date(2024, 2, 10)),
            Sale(amount=Decimal("2500"), reference="S-3", partner_id="p1",
                 date=datetime.date(2024, 1, 20), payout_status=PayoutStatus.PROCESSING),
            Sale(amount=Decimal("0"), reference="S-4"),
        ]

    def test_two_sales(self):
        """150 + 50 = 200 commission over two sales"""
        report = aggregate([Sale(amount=1000), Sale(amount=100)], self.rule)

        self.assertEqual(report.total_commission_amount, Decimal("200"))
        self.assertEqual(report.total_sales_amount, Decimal("1100"))
        self.assertEqual(report.count, 2)
        self.assertEqual(report.by_group, {})

    def test_empty_input(self):
        """No sales gives an all-zero report"""
        report = aggregate([], self.rule)

        self.assertEqual(report.total_sales_amount, Decimal("0"))
        self.assertEqual(report.total_commission_amount, Decimal("0"))
        self.assertEqual(report.count, 0)

    def test_total_is_sum_of_sale_commissions(self):
        """Report total equals the per-sale commissions added up"""
        sales = [Sale(amount=Decimal(a)) for a in ("0.10", "0.20", "333.33", "1234.57", "99999.99")]
        expected = sum(calculate_commission(s.amount, self.rule) for s in sales)

        self.assertEqual(aggregate(sales, self.rule).total_commission_amount, expected)
        self.assertEqual(calculate_total_commission(sales, self.rule), expected)

    def test_group_by_partner_partitions_sales(self):
        """Every sale lands in exactly one group, groups in first-seen order"""
        report = aggregate(self.sales, self.rule, group_by=by_partner)

        self.assertEqual(list(report.by_group), ["p1", "p2", None])
        self.assertEqual(sum(g.count for g in report.by_group.values()), len(self.sales))
        self.assertEqual(
            sum(g.total_commission_amount for g in report.by_group.values()),
            report.total_commission_amount,
        )
        self.assertEqual(
            sum(g.total_sales_amount for g in report.by_group.values()),
            report.total_sales_amount,
        )

        p1 = report.by_group["p1"]
        self.assertEqual(p1.count, 2)
        self.assertEqual(p1.total_sales_amount, Decimal("3500"))
        self.assertEqual(p1.total_commission_amount, Decimal("525"))
        self.assertEqual(p1.by_group, {})

    def test_group_by_month(self):
        """Undated sales fall in the None bucket"""
        report = aggregate(self.sales, self.rule, group_by=by_month)

        self.assertEqual(list(report.by_group), ["2024-01", "2024-02", None])
        self.assertEqual(report.by_group["2024-01"].count, 2)
        self.assertEqual(report.by_group["2024-02"].total_commission_amount, Decimal("50"))

    def test_group_by_payout_status(self):
        """Pending commission can be read from the PENDING bucket"""
        report = aggregate(self.sales, self.rule, group_by=by_payout_status)

        self.assertEqual(
            list(report.by_group),
            [PayoutStatus.PAID, PayoutStatus.PENDING, PayoutStatus.PROCESSING],
        )
        self.assertEqual(report.by_group[PayoutStatus.PENDING].total_commission_amount, Decimal("100"))

    def test_input_not_modified(self):
        """Aggregation leaves the caller's list untouched"""
        before = list(self.sales)
        aggregate(self.sales, self.rule, group_by=by_partner)
        self.assertEqual(self.sales, before)

    def test_accepts_generator(self):
        """Any iterable of sales works"""
        report = aggregate((s for s in self.sales), self.rule)
        self.assertEqual(report.count, 4)

    def test_invalid_sale_aborts_batch(self):
        """One bad sale fails the whole report and is logged"""
        sales = self.sales + [Sale(amount=Decimal("-10"), reference="S-BAD")]

        with self.assertLogs("partner_commissions.services.aggregation", level="WARNING"):
            with self.assertRaises(InvalidInputError) as ctx:
                aggregate(sales, self.rule)
        self.assertIn("S-BAD", str(ctx.exception))

    def test_to_dict(self):
        """Export data uses string amounts and readable group keys"""
        report = aggregate(self.sales, self.rule, group_by=by_payout_status)
        data = report.to_dict()

        self.assertEqual(data["count"], 4)
        self.assertEqual(data["total_sales_amount"], "3600")
        self.assertEqual(list(data["by_group"]), ["paid", "pending", "processing"])
        self.assertNotIn("by_group", data["by_group"]["paid"])

    def test_to_dict_none_key(self):
        """The None group is exported as "none" """
        data = aggregate(self.sales, self.rule, group_by=by_partner).to_dict()
        self.assertEqual(list(data["by_group"]), ["p1", "p2", "none"])


class TestFilterSales(unittest.TestCase):
    """Test cases for dashboard period and status filters"""

    def setUp(self):
        """Friday 15 March 2024 with sales spread over recent months"""
        self.today = datetime.date(2024, 3, 15)
        dates = [
            datetime.date(2024, 3, 11),
            datetime.date(2024, 3, 1),
            datetime.date(2024, 2, 29),
            datetime.date(2024, 2, 10),
            datetime.date(2024, 1, 5),
            datetime.date(2023, 12, 31),
            None,
        ]
        self.sales = [
            Sale(amount=Decimal("100"), reference=f"S-{i}", date=d)
            for i, d in enumerate(dates)
        ]

    def _refs(self, sales):
        return [s.reference for s in sales]

    def test_all(self):
        """ALL keeps everything, undated sales included"""
        self.assertEqual(len(filter_sales(self.sales, Period.ALL, today=self.today)), 7)

    def test_week(self):
        """WEEK starts on Monday"""
        self.assertEqual(self._refs(filter_sales(self.sales, Period.WEEK, today=self.today)), ["S-0"])

    def test_month(self):
        """MONTH starts on the first of the month"""
        self.assertEqual(
            self._refs(filter_sales(self.sales, Period.MONTH, today=self.today)), ["S-0", "S-1"]
        )

    def test_last_month(self):
        """LAST_MONTH is the whole previous calendar month"""
        self.assertEqual(
            self._refs(filter_sales(self.sales, "last-month", today=self.today)), ["S-2", "S-3"]
        )

    def test_last_month_in_january(self):
        """In January the previous month is December of last year"""
        result = filter_sales(self.sales, Period.LAST_MONTH, today=datetime.date(2024, 1, 10))
        self.assertEqual(self._refs(result), ["S-5"])

    def test_year(self):
        """YEAR starts on 1 January"""
        self.assertEqual(
            self._refs(filter_sales(self.sales, Period.YEAR, today=self.today)),
            ["S-0", "S-1", "S-2", "S-3", "S-4"],
        )

    def test_payout_status(self):
        """Status filter combines with the period"""
        sales = [
            Sale(amount=Decimal("1"), reference="a", date=self.today, payout_status=PayoutStatus.PAID),
            Sale(amount=Decimal("1"), reference="b", date=self.today),
        ]
        result = filter_sales(sales, Period.MONTH, PayoutStatus.PENDING, today=self.today)
        self.assertEqual(self._refs(result), ["b"])

    def test_unknown_period(self):
        """Unknown period names raise"""
        with self.assertRaises(InvalidInputError):
            filter_sales(self.sales, "decade", today=self.today)

    def test_payout_status_as_string(self):
        """Dashboard status strings match like the enum; "all" keeps every status"""
        sales = [
            Sale(amount=Decimal("1"), reference="a", payout_status=PayoutStatus.PAID),
            Sale(amount=Decimal("1"), reference="b"),
        ]
        self.assertEqual(self._refs(filter_sales(sales, "all", "paid")), ["a"])
        self.assertEqual(self._refs(filter_sales(sales, "all", "pending")), ["b"])
        self.assertEqual(self._refs(filter_sales(sales, "all", "all")), ["a", "b"])

    def test_unknown_payout_status(self):
        """Unknown status names raise instead of matching nothing"""
        with self.assertRaises(InvalidInputError):
            filter_sales(self.sales, Period.ALL, "refunded", today=self.today)

    def test_timestamps_compare_by_date(self):
        """Sales dated with a datetime filter and group by their calendar day"""
        sales = [
            Sale(amount=Decimal("1"), reference="a", date=datetime.datetime(2024, 3, 12, 10, 30)),
            Sale(amount=Decimal("1"), reference="b", date=datetime.datetime(2024, 2, 29, 23, 59)),
        ]
        self.assertEqual(self._refs(filter_sales(sales, Period.MONTH, today=self.today)), ["a"])
        self.assertEqual(self._refs(filter_sales(sales, Period.LAST_MONTH, today=self.today)), ["b"])
        self.assertEqual(
            self._refs(filter_sales(sales, Period.MONTH, today=datetime.datetime(2024, 3, 15, 8))),
            ["a"],
        )
        self.assertEqual([by_month(s) for s in sales], ["2024-03", "2024-02"])


class TestCountLeadStatuses(unittest.TestCase):
    """Test cases for the lead status breakdown"""

    def test_counts_every_status(self):
        """Statuses may be enum members, stored values or labels"""
        counts = count_lead_statuses(["pending", "Closed", "Spoken To", LeadStatus.REJECTED, "closed"])

        self.assertEqual(list(counts), list(LeadStatus))
        self.assertEqual(counts[LeadStatus.PENDING], 1)
        self.assertEqual(counts[LeadStatus.SPOKEN], 1)
        self.assertEqual(counts[LeadStatus.CLOSED], 2)
        self.assertEqual(counts[LeadStatus.REJECTED], 1)

    def test_empty(self):
        """No leads still lists every status"""
        self.assertEqual(set(count_lead_statuses([]).values()), {0})

    def test_unknown_status(self):
        """Free-form statuses are rejected"""
        with self.assertRaises(InvalidInputError):
            count_lead_statuses(["maybe"])


if __name__ == '__main__':
    unittest.main()
