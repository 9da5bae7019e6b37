from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from orders.models import Order, OrderItem, OrderPayment
from orders.services import OrderService, normalize_item
from prescriptions.models import Prescription


class TestNormalizeItem(TestCase):

    def test_fixed_discount_wins_over_percent(self):
        row = normalize_item({'rate': '100', 'qty': '1', 'discount_amount': '20', 'discount_percent': '50'}, 1)
        self.assertEqual(row['discount_amount'], Decimal('20.00'))
        self.assertEqual(row['amount'], Decimal('80.00'))

    def test_percent_discount(self):
        row = normalize_item({'rate': '250', 'qty': '2', 'discount_percent': '10'}, 1)
        self.assertEqual(row['discount_amount'], Decimal('50.00'))
        self.assertEqual(row['amount'], Decimal('450.00'))

    def test_defaults(self):
        row = normalize_item({'item_type': 'Gadget', 'rate': 'x', 'qty': '0'}, 3)
        self.assertEqual(row['si'], 3)
        self.assertEqual(row['item_type'], 'other')
        self.assertEqual(row['qty'], 1)
        self.assertEqual(row['amount'], Decimal('0.00'))
        self.assertEqual(row['discount_amount'], Decimal('0.00'))


class TestOrderService(TestCase):

    def setUp(self):
        self.prescription = Prescription.objects.create(
            prescription_no='RX-20261018-001', name='Meera Iyer', mobile_no='9845000000',
        )

    def payload(self, **overrides):
        data = {
            'prescription_id': self.prescription.id,
            'order_date': '2026-10-18',
            'delivery_date': '2026-10-22',
            'booked_by': 'Suresh',
            'items': [
                {'item_type': 'frame', 'item_code': 'FR-101', 'item_name': 'Titan Rimless',
                 'brand_name': 'Titan', 'rate': '2500', 'qty': '1', 'discount_percent': '10'},
                {'item_type': 'lens', 'item_code': 'LN-1.56', 'item_name': 'Single Vision',
                 'index': '1.56', 'coating': 'ARC', 'rate': '1200', 'qty': '2', 'tax_percent': '5'},
            ],
            'payment': {'advance_cash': '1000', 'advance_card_upi': '500'},
        }
        data.update(overrides)
        return data

    def test_save_order(self):
        result = OrderService.save(self.payload())

        self.assertTrue(result['success'])
        self.assertTrue(result['order_no'].startswith('ORD-'))
        self.assertTrue(result['bill_no'].startswith('BILL-'))
        order = Order.objects.get(id=result['order_id'])
        self.assertEqual(order.prescription, self.prescription)
        self.assertEqual(order.status, 'Processing')
        self.assertEqual(order.items.count(), 2)

        frame = order.items.get(item_type='frame')
        self.assertEqual(frame.discount_amount, Decimal('250.00'))
        self.assertEqual(frame.amount, Decimal('2250.00'))

        payment = order.payment
        # 2500 + 2400 base, 120 tax, 250 discount
        self.assertEqual(payment.payment_estimate, Decimal('5020.00'))
        self.assertEqual(payment.tax_amount, Decimal('120.00'))
        self.assertEqual(payment.final_amount, Decimal('4770.00'))
        self.assertEqual(payment.total_advance, Decimal('1500.00'))
        self.assertEqual(payment.balance, Decimal('3270.00'))

    def test_prescription_is_required(self):
        result = OrderService.save(self.payload(prescription_id=None))
        self.assertFalse(result['success'])
        self.assertEqual(result['message'], 'A prescription must be selected before saving the order')

        result = OrderService.save(self.payload(prescription_id=999))
        self.assertEqual(result['message'], 'Prescription not found')

        result = OrderService.save(self.payload(prescription_id='abc'))
        self.assertFalse(result['success'])
        self.assertEqual(result['message'], 'Prescription not found')

    def test_items_are_required(self):
        result = OrderService.save(self.payload(items=[]))
        self.assertFalse(result['success'])
        self.assertEqual(result['message'], 'Add at least one item to the order')

    def test_duplicate_order_number(self):
        OrderService.save(self.payload(order_no='ORD-1'))
        result = OrderService.save(self.payload(order_no='ORD-1'))
        self.assertFalse(result['success'])
        self.assertIn('already in use', result['message'])
        self.assertEqual(Order.objects.count(), 1)

    def test_failed_payment_write_rolls_back_order(self):
        with mock.patch('orders.services._upsert_payment', side_effect=DatabaseError('disk full')):
            result = OrderService.save(self.payload())

        self.assertFalse(result['success'])
        self.assertEqual(result['message'], 'Failed to save order')
        self.assertFalse(Order.objects.exists())
        self.assertFalse(OrderItem.objects.exists())
        self.assertFalse(OrderPayment.objects.exists())

    def test_update_replaces_items_and_payment(self):
        saved = OrderService.save(self.payload())

        result = OrderService.update(saved['order_id'], self.payload(
            status='Ready',
            items=[{'item_type': 'frame', 'item_name': 'Ray-Ban', 'rate': '4000', 'qty': '1'}],
            payment={'advance_cash': '4000'},
        ))

        self.assertTrue(result['success'])
        self.assertEqual(result['order_no'], saved['order_no'])
        order = Order.objects.get(id=saved['order_id'])
        self.assertEqual(order.status, 'Ready')
        self.assertEqual(order.items.count(), 1)
        self.assertEqual(order.payment.final_amount, Decimal('4000.00'))
        self.assertEqual(order.payment.balance, Decimal('0.00'))
        self.assertEqual(OrderPayment.objects.count(), 1)

    def test_update_unknown_order(self):
        result = OrderService.update(999, self.payload())
        self.assertFalse(result['success'])
        self.assertEqual(result['message'], 'Order not found')

    def test_lookups_and_delete(self):
        saved = OrderService.save(self.payload())

        orders = OrderService.get_by_prescription_id(self.prescription.id)
        self.assertEqual([o['order_no'] for o in orders], [saved['order_no']])

        order = OrderService.get(saved['order_id'])
        self.assertEqual(order['delivery_date'], '2026-10-22')
        self.assertEqual(len(order['items']), 2)
        self.assertEqual(order['payment']['balance'], Decimal('3270.00'))

        self.assertTrue(OrderService.delete(saved['order_id'])['success'])
        self.assertIsNone(OrderService.get(saved['order_id']))
        self.assertFalse(OrderService.delete(saved['order_id'])['success'])
