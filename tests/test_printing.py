from decimal import Decimal

from django.test import TestCase, override_settings

from billing.calculations import bill_summary
from contact_lens.services import ContactLensService, load_contact_lens
from orders.printing import bill_context, contact_lens_card_context, order_card_context, render_order_card
from orders.services import OrderService, load_order
from prescriptions.models import Prescription


@override_settings(SHOP_NAME='Clear Vision Opticals', CURRENCY_SYMBOL='Rs.')
class TestOrderCardPrint(TestCase):

    def setUp(self):
        prescription = Prescription.objects.create(
            prescription_no='RX-20261018-010', name='Deepa Menon', mobile_no='9447000000',
        )
        saved = OrderService.save({
            'prescription_id': prescription.id,
            'order_date': '2026-10-18',
            'delivery_date': '2026-10-21',
            'remarks': 'Call before delivery',
            'items': [
                {'item_type': 'frame', 'item_name': 'Half Rim', 'brand_name': 'Vogue', 'rate': '1800', 'qty': '1'},
                {'item_type': 'lens', 'item_name': 'Progressive', 'rate': '3200', 'qty': '1'},
            ],
            'payment': {'advance_cash': '2000'},
        })
        self.order = load_order(saved['order_id'])

    def test_context(self):
        context = order_card_context(self.order)
        self.assertEqual(context['title'], 'Order Card')
        self.assertEqual(context['order_number'], self.order.order_no)
        self.assertEqual(context['customer_mobile'], '9447000000')
        self.assertEqual(context['estimate_amount'], Decimal('5000.00'))
        self.assertEqual(context['advance_amount'], Decimal('2000.00'))
        self.assertEqual(context['balance_amount'], Decimal('3000.00'))
        self.assertEqual(context['items'][0]['description'], 'Half Rim Vogue')

    def test_rendered_card(self):
        html = render_order_card(order_card_context(self.order))
        self.assertIn('Clear Vision Opticals', html)
        self.assertIn(self.order.order_no, html)
        self.assertIn('Deepa Menon', html)
        self.assertIn('21-10-2026', html)
        self.assertIn('Rs.3000.00', html)
        self.assertIn('Call before delivery', html)
        self.assertIn('window.print()', html)
        self.assertIn('size: 80mm auto', html)

    def test_print_script_can_be_disabled(self):
        context = order_card_context(self.order)
        context['auto_print'] = False
        self.assertNotIn('window.print()', render_order_card(context))


class TestContactLensCardPrint(TestCase):

    def test_context_nets_discount_from_estimate(self):
        saved = ContactLensService.save({
            'prescription': {'name': 'Farah Ali', 'mobile': '9555000000'},
            'items': [{'side': 'LE', 'brand': 'Bausch', 'power': '-3.00', 'qty': 2, 'rate': '800'}],
            'payment': {'discount_amount': '100', 'cash_advance': '500'},
        })
        context = contact_lens_card_context(load_contact_lens(saved['id']))

        self.assertEqual(context['title'], 'Contact Lens Card')
        self.assertEqual(context['order_number'], saved['prescription_no'])
        self.assertEqual(context['estimate_amount'], Decimal('1500.00'))
        self.assertEqual(context['balance_amount'], Decimal('1000.00'))
        self.assertEqual(context['items'][0]['description'], 'Bausch -3.00 (LE)')
        self.assertIn('Farah Ali', render_order_card(context))


class TestCashMemoPrint(TestCase):

    def test_bill_context(self):
        summary = bill_summary(
            [{'item_name': 'Sunglasses', 'qty': 1, 'rate': 2000, 'discount_percent': 10, 'tax_percent': 12}],
            {'cash': 1000},
        )
        context = bill_context(summary, {'name': 'Gopal', 'mobile': '9666000000'}, 'ORD-1')

        self.assertEqual(context['title'], 'Cash Memo')
        self.assertEqual(context['items'][0]['amount'], Decimal('1800.00'))
        self.assertEqual(context['discount_amount'], Decimal('200.00'))
        self.assertEqual(context['tax_amount'], Decimal('216.00'))
        self.assertEqual(context['estimate_amount'], Decimal('2016.00'))
        self.assertEqual(context['balance_amount'], Decimal('1016.00'))

        html = render_order_card(context)
        self.assertIn('Cash Memo', html)
        self.assertIn('Gopal', html)
        self.assertIn('2016.00', html)
