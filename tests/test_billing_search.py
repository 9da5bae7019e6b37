from decimal import Decimal
from unittest import mock

from django.test import TestCase

from billing.services import (
    JOB_CONTACT_LENS,
    JOB_MERGED,
    JOB_ORDER,
    JOB_PRESCRIPTION,
    BillingSearchError,
    RecordNotFound,
    format_search_result,
    get_customer_purchase_history,
    get_record_details,
    merge_results,
    unified_search,
)
from contact_lens.services import ContactLensService
from orders.services import OrderService
from prescriptions.services import PrescriptionService


def save_prescription(name, mobile):
    result = PrescriptionService.save({
        'name': name,
        'mobile_no': mobile,
        'date': '2026-10-01',
        'eyes': {'right': {'dv': {'sph': '-1.00', 'rpd': '31'}}, 'left': {'dv': {'sph': '-0.75', 'lpd': '30'}}},
    })
    assert result['success'], result
    return result


def save_contact_lens(name, mobile):
    result = ContactLensService.save({
        'prescription': {'name': name, 'mobile': mobile},
        'items': [{'side': 'RE', 'brand': 'Acuvue', 'power': '-1.00', 'qty': 1, 'rate': '1200'}],
        'payment': {'cash_advance': '200'},
    })
    assert result['success'], result
    return result


def save_order(prescription_id):
    result = OrderService.save({
        'prescription_id': prescription_id,
        'order_date': '2026-10-05',
        'items': [{'item_type': 'frame', 'item_code': 'FR-1', 'item_name': 'Rimless', 'brand_name': 'Titan',
                   'rate': '2000', 'qty': '1'}],
        'payment': {'advance_cash': '500'},
    })
    assert result['success'], result
    return result


class TestMergeRules(TestCase):

    def test_prescription_and_contact_lens_merge_on_mobile(self):
        rx = save_prescription('Kiran Das', '9000000001')
        cl = save_contact_lens('Kiran Das', '9000000001')

        results = unified_search('kiran')

        self.assertEqual(len(results), 1)
        merged = results[0]
        self.assertEqual(merged['job_type'], JOB_MERGED)
        self.assertEqual(merged['id'], rx['id'])
        self.assertEqual(merged['reference_no'], f"{rx['prescription_no']} | {cl['prescription_no']}")
        self.assertTrue(merged['original_data']['is_merged'])
        self.assertEqual(merged['original_data']['source_types'], ['prescription', 'contact_lens'])
        self.assertEqual(merged['original_data']['contact_lens_id'], cl['id'])

    def test_contact_lens_only_customer(self):
        cl = save_contact_lens('Lata Nair', '9000000002')

        results = unified_search('9000000002')

        self.assertEqual([r['job_type'] for r in results], [JOB_CONTACT_LENS])
        self.assertEqual(results[0]['id'], cl['id'])
        self.assertFalse(results[0]['original_data']['is_merged'])

    def test_prescription_only_customer(self):
        save_prescription('Mohan Lal', '9000000003')
        results = unified_search('Mohan')
        self.assertEqual([r['job_type'] for r in results], [JOB_PRESCRIPTION])

    def test_orders_are_listed_separately(self):
        rx = save_prescription('Nisha Paul', '9000000004')
        order = save_order(rx['id'])

        results = unified_search('nisha')

        self.assertEqual(sorted(r['job_type'] for r in results), [JOB_ORDER, JOB_PRESCRIPTION])
        order_hit = next(r for r in results if r['job_type'] == JOB_ORDER)
        self.assertEqual(order_hit['reference_no'], order['order_no'])
        self.assertEqual(order_hit['balance_amount'], Decimal('1500.00'))
        self.assertEqual(order_hit['original_data']['source_types'], ['order'])

    def test_blank_term(self):
        self.assertEqual(unified_search('   '), [])

    def test_unexpected_failure_is_wrapped(self):
        with mock.patch('billing.services.merge_results', side_effect=KeyError('mobile')):
            with self.assertRaisesMessage(BillingSearchError, 'Search failed. Please try again.'):
                unified_search('anyone')


class TestMergeResultsUnit(TestCase):

    def hit(self, mobile, reference_no, date, **extra):
        row = {'id': 1, 'mobile': mobile, 'reference_no': reference_no, 'date': date, 'original_data': {}}
        row.update(extra)
        return row

    def test_results_without_mobile_are_dropped(self):
        results = merge_results(
            orders=[],
            contact_lenses=[self.hit('', 'CL-1', '2026-10-02')],
            prescriptions=[self.hit('', 'RX-1', '2026-10-01')],
        )
        self.assertEqual(results, [])

    def test_first_prescription_per_mobile_wins_and_newest_first(self):
        results = merge_results(
            orders=[self.hit('1', 'ORD-1', '2026-10-03')],
            contact_lenses=[],
            prescriptions=[self.hit('1', 'RX-2', '2026-10-02'), self.hit('1', 'RX-1', '2026-10-01')],
        )
        self.assertEqual([r['reference_no'] for r in results], ['ORD-1', 'RX-2'])


class TestSearchResultFormatting(TestCase):

    def test_label_and_sub_label(self):
        formatted = format_search_result({
            'id': 7,
            'name': 'Kiran Das',
            'mobile': '9000000001',
            'reference_no': 'RX-1 | CL-1',
            'job_type': JOB_MERGED,
            'date': '2026-10-05T10:30:00+05:30',
            'item_count': 2,
            'source_type': 'prescription',
            'original_data': {'is_merged': True},
        })
        self.assertEqual(formatted['label'], 'Kiran Das (RX-1 | CL-1)')
        self.assertEqual(formatted['sub_label'], '9000000001 • P, CL • 05-10-2026 • Items: 2')
        self.assertEqual(formatted['source_type'], 'prescription')


class TestRecordDetails(TestCase):

    def setUp(self):
        self.rx = save_prescription('Omar Khan', '9000000005')
        self.order = save_order(self.rx['id'])
        self.cl = save_contact_lens('Omar Khan', '9000000005')

    def test_order_details(self):
        details = get_record_details(self.order['order_id'], 'order')
        self.assertEqual(details['reference_no'], self.order['order_no'])
        self.assertEqual(details['name'], 'Omar Khan')
        item = details['items'][0]
        self.assertEqual(item['item_code'], 'FR-1')
        self.assertEqual(item['order_no'], self.order['order_no'])
        self.assertEqual(item['amount'], Decimal('2000.00'))
        self.assertEqual(item['source_type'], 'order')

    def test_contact_lens_details(self):
        details = get_record_details(self.cl['id'], 'contact_lens')
        self.assertEqual(details['reference_no'], self.cl['prescription_no'])
        self.assertEqual(details['balance_amount'], Decimal('1000.00'))
        self.assertEqual(details['items'][0]['item_name'], 'Acuvue P:-1.00')
        self.assertEqual(details['items'][0]['tax_percent'], Decimal('0.00'))

    def test_prescription_details(self):
        details = get_record_details(self.rx['id'], 'prescription')
        self.assertEqual(details['prescription_no'], self.rx['prescription_no'])
        self.assertEqual(details['mobile'], '9000000005')

    def test_missing_and_unknown(self):
        with self.assertRaises(RecordNotFound):
            get_record_details(999, 'order')
        with self.assertRaises(RecordNotFound):
            get_record_details(self.rx['id'], 'invoice')


class TestPurchaseHistory(TestCase):

    def test_history_flattens_everything_for_mobile(self):
        rx = save_prescription('Pooja Shah', '9000000006')
        order = save_order(rx['id'])
        save_contact_lens('Pooja Shah', '9000000006')
        save_prescription('Someone Else', '9111111111')

        history = get_customer_purchase_history('9000000006')

        types = sorted(row['type'] for row in history)
        self.assertEqual(types, ['contact_lens', 'order', 'prescription'])
        exam = next(row for row in history if row['type'] == 'prescription')
        self.assertEqual(exam['item_code'], 'RX-EXAM')
        self.assertEqual(exam['item_details'], 'RE: Sph: -1.00 | LE: Sph: -0.75 | PD: R 31 / L 30')
        frame = next(row for row in history if row['type'] == 'order')
        self.assertEqual(frame['reference_no'], order['order_no'])
        self.assertEqual(frame['item_name'], 'Rimless (Titan)')
        self.assertEqual(frame['item_details'], 'Brand: Titan')

    def test_blank_mobile(self):
        self.assertEqual(get_customer_purchase_history(''), [])
