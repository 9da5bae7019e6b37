from django import template

from billing.calculations import money as to_money

register = template.Library()


@register.filter
def money(value):
    """Two-place amount: {{ payment.balance|money }} -> 1250.00"""
    return f'{to_money(value):.2f}'
