from django.conf import settings


def global_context(request):
    """
    Injects common context variables into every template:
      - shop_name        : printed on screens and cards
      - currency_symbol  : prefix for money columns
      - nav_items        : top navigation (url name, label)
    """
    return {
        'shop_name':        settings.SHOP_NAME,
        'currency_symbol':  settings.CURRENCY_SYMBOL,
        'nav_items': [
            ('core:dashboard', 'Dashboard'),
            ('prescriptions:prescription_form', 'Prescription'),
            ('contact_lens:contact_lens_form', 'Contact Lens'),
            ('orders:order_card', 'Order Card'),
            ('billing:billing', 'Billing'),
        ],
    }
