# orders/signals.py

"""
ORDER DOMAIN SIGNALS

refund_owed
    Sent (after commit) whenever a RefundObligation is recorded.
    kwargs: obligation, order
"""

from django.dispatch import Signal

refund_owed = Signal()
