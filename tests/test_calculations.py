from decimal import Decimal

from django.test import SimpleTestCase

from billing.calculations import (
    DISCOUNT_FIXED,
    DISCOUNT_PERCENTAGE,
    apply_discount_to_all,
    apply_item_discount,
    balance,
    bill_summary,
    contact_lens_item_amounts,
    contact_lens_payment_summary,
    line_totals,
    money,
    order_payment_summary,
    to_decimal,
)
from core.utils import to_int


class TestMoneyHelpers(SimpleTestCase):

    def test_to_decimal_falls_back_on_junk(self):
        self.assertEqual(to_decimal('abc'), Decimal('0'))
        self.assertEqual(to_decimal(''), Decimal('0'))
        self.assertEqual(to_decimal(None, default=5), Decimal('5'))
        self.assertEqual(to_decimal(' 12.50 '), Decimal('12.50'))

    def test_non_finite_values_fall_back(self):
        for junk in ('nan', 'NaN', 'Infinity', '-inf', 'inf', Decimal('NaN')):
            with self.subTest(junk=junk):
                self.assertEqual(to_decimal(junk), Decimal('0'))
                self.assertEqual(money(junk), Decimal('0.00'))
        self.assertEqual(to_decimal('inf', default=7), Decimal('7'))

    def test_to_int_rejects_non_finite(self):
        self.assertIsNone(to_int('inf'))
        self.assertIsNone(to_int('Infinity'))
        self.assertEqual(to_int('nan', 1), 1)
        self.assertEqual(to_int('12.0'), 12)

    def test_summaries_survive_non_finite_input(self):
        summary = bill_summary([{'qty': 1, 'rate': 'nan', 'discount_percent': 'inf'}], {'cash': 'Infinity'})
        self.assertEqual(summary['payable'], Decimal('0.00'))
        self.assertEqual(summary['advance'], Decimal('0.00'))

        payment = contact_lens_payment_summary(
            [{'qty': 'inf', 'rate': '500', 'discountPercent': 'nan'}], {'cash_advance': 'nan'}
        )
        self.assertEqual(payment['payment_total'], Decimal('500.00'))
        self.assertEqual(payment['balance'], Decimal('500.00'))

    def test_money_rounds_half_up(self):
        self.assertEqual(money('2.005'), Decimal('2.01'))
        self.assertEqual(money(3), Decimal('3.00'))

    def test_balance_is_never_negative(self):
        self.assertEqual(balance(1000, 100, 200), Decimal('700.00'))
        self.assertEqual(balance(1000, 100, 2000), Decimal('0.00'))
        self.assertEqual(balance(100, 500, 0), Decimal('0.00'))


class TestOrderCardArithmetic(SimpleTestCase):

    def test_line_totals_with_tax(self):
        totals = line_totals(100, 2, 18)
        self.assertEqual(totals['base'], Decimal('200'))
        self.assertEqual(totals['tax'], Decimal('36'))
        self.assertEqual(totals['total_with_tax'], Decimal('236'))

    def test_percentage_discount_on_single_line(self):
        item = apply_item_discount({'rate': 100, 'qty': 2}, DISCOUNT_PERCENTAGE, 10)
        self.assertEqual(item['discount_amount'], Decimal('20.00'))
        self.assertEqual(item['discount_percent'], Decimal('10.00'))
        self.assertEqual(item['amount'], Decimal('180.00'))

    def test_fixed_discount_derives_percent(self):
        item = apply_item_discount({'rate': 100, 'qty': 1}, DISCOUNT_FIXED, 25)
        self.assertEqual(item['discount_percent'], Decimal('25.00'))
        self.assertEqual(item['amount'], Decimal('75.00'))

    def test_fixed_discount_is_capped_at_line_total(self):
        item = apply_item_discount({'rate': 100, 'qty': 1}, DISCOUNT_FIXED, 500)
        self.assertEqual(item['discount_amount'], Decimal('100.00'))
        self.assertEqual(item['amount'], Decimal('0.00'))

    def test_discount_on_taxed_line_removes_base_share(self):
        # 10% of 118 is 11.80, of which 10.00 belongs to the base
        item = apply_item_discount({'rate': 100, 'qty': 1, 'tax_percent': 18}, DISCOUNT_PERCENTAGE, 10)
        self.assertEqual(item['discount_amount'], Decimal('11.80'))
        self.assertEqual(item['amount'], Decimal('90.00'))

    def test_zero_value_line_is_left_alone(self):
        item = {'rate': 0, 'qty': 1, 'item_name': 'Case'}
        self.assertEqual(apply_item_discount(item, DISCOUNT_PERCENTAGE, 10), item)

    def test_discount_to_all_is_proportional(self):
        items = apply_discount_to_all(
            [{'rate': 100, 'qty': 1}, {'rate': 200, 'qty': 1}], DISCOUNT_FIXED, 30
        )
        self.assertEqual([i['discount_amount'] for i in items], [Decimal('10.00'), Decimal('20.00')])
        self.assertEqual([i['amount'] for i in items], [Decimal('90.00'), Decimal('180.00')])
        self.assertEqual(sum(i['discount_amount'] for i in items), Decimal('30.00'))

    def test_discount_to_all_percentage(self):
        items = apply_discount_to_all([{'rate': 50, 'qty': 2}], DISCOUNT_PERCENTAGE, 20)
        self.assertEqual(items[0]['discount_amount'], Decimal('20.00'))
        self.assertEqual(items[0]['amount'], Decimal('80.00'))

    def test_discount_to_all_rejects_bad_input(self):
        with self.assertRaisesMessage(ValueError, 'greater than 0'):
            apply_discount_to_all([{'rate': 100, 'qty': 1}], DISCOUNT_FIXED, 0)
        with self.assertRaisesMessage(ValueError, 'No items to apply discount to'):
            apply_discount_to_all([], DISCOUNT_PERCENTAGE, 10)

    def test_order_payment_summary(self):
        summary = order_payment_summary(
            [
                {'rate': 100, 'qty': 2, 'tax_percent': 18, 'discount_amount': '10'},
                {'rate': 50, 'qty': 1},
            ],
            advance_cash=100,
            advance_card_upi='50',
        )
        self.assertEqual(summary['payment_estimate'], Decimal('286.00'))
        self.assertEqual(summary['tax_amount'], Decimal('36.00'))
        self.assertEqual(summary['discount_amount'], Decimal('10.00'))
        self.assertEqual(summary['final_amount'], Decimal('276.00'))
        self.assertEqual(summary['total_advance'], Decimal('150.00'))
        self.assertEqual(summary['balance'], Decimal('126.00'))

    def test_final_matches_line_amounts_without_tax(self):
        items = [
            apply_item_discount({'rate': 1200, 'qty': 1}, DISCOUNT_PERCENTAGE, 15),
            apply_item_discount({'rate': 800, 'qty': 2}, DISCOUNT_FIXED, 100),
        ]
        summary = order_payment_summary(items)
        self.assertEqual(summary['final_amount'], sum(i['amount'] for i in items))

    def test_overpaid_order_has_zero_balance(self):
        summary = order_payment_summary([{'rate': 100, 'qty': 1}], advance_cash=150)
        self.assertEqual(summary['balance'], Decimal('0.00'))


class TestContactLensArithmetic(SimpleTestCase):

    def test_item_amounts(self):
        amounts = contact_lens_item_amounts(2, '1500', 10)
        self.assertEqual(amounts['gross'], Decimal('3000.00'))
        self.assertEqual(amounts['discount_amount'], Decimal('300.00'))
        self.assertEqual(amounts['final_amount'], Decimal('2700.00'))

    def test_item_discount_percent_is_clamped(self):
        self.assertEqual(contact_lens_item_amounts(1, 100, 150)['final_amount'], Decimal('0.00'))
        self.assertEqual(contact_lens_item_amounts(1, 100, -5)['final_amount'], Decimal('100.00'))

    def test_payment_summary_falls_back_to_gross_estimate(self):
        summary = contact_lens_payment_summary(
            [{'qty': 2, 'rate': 1500, 'discountPercent': 10}],
            {'estimate': '', 'discount_amount': 200, 'cash_advance': 1000, 'card_upi_advance': 500},
        )
        self.assertEqual(summary['payment_total'], Decimal('2700.00'))
        self.assertEqual(summary['estimate'], Decimal('3000.00'))
        self.assertEqual(summary['advance'], Decimal('1500.00'))
        self.assertEqual(summary['balance'], Decimal('1300.00'))

    def test_payment_summary_keeps_entered_estimate(self):
        summary = contact_lens_payment_summary(
            [{'quantity': 1, 'rate': 1000}],
            {'estimate': 1200, 'cheque_advance': 200},
        )
        self.assertEqual(summary['estimate'], Decimal('1200.00'))
        self.assertEqual(summary['balance'], Decimal('1000.00'))


class TestBillSummary(SimpleTestCase):

    def test_bill_summary(self):
        summary = bill_summary(
            [{'item_name': 'Frame', 'qty': 2, 'rate': 100, 'discount_percent': 10, 'tax_percent': 5}],
            {'cash': 50},
        )
        line = summary['lines'][0]
        self.assertEqual(line['amount'], Decimal('200.00'))
        self.assertEqual(line['discount'], Decimal('20.00'))
        self.assertEqual(line['tax_amount'], Decimal('9.00'))
        self.assertEqual(line['item_name'], 'Frame')
        self.assertEqual(summary['estimate'], Decimal('200.00'))
        self.assertEqual(summary['scheme_discount'], Decimal('20.00'))
        self.assertEqual(summary['payable'], Decimal('189.00'))
        self.assertEqual(summary['advance'], Decimal('50.00'))
        self.assertEqual(summary['balance'], Decimal('139.00'))

    def test_empty_bill(self):
        summary = bill_summary([])
        self.assertEqual(summary['payable'], Decimal('0.00'))
        self.assertEqual(summary['balance'], Decimal('0.00'))
