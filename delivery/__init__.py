"""
Email Delivery Module

Order confirmation email: message building, SMTP delivery, and the
best-effort notifier triggered after webhook reconciliation.
"""

from .email_builder import EmailData, build_order_confirmation_email
from .notifier import OrderNotifier
from .smtp_client import SmtpEmailSender, SmtpResponse

__all__ = ["EmailData", "build_order_confirmation_email", "OrderNotifier", "SmtpEmailSender", "SmtpResponse"]
