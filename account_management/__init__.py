"""
Account Management Module
Administrator accounts, password hashing and first-run admin bootstrap
"""

from account_management.models import AdminUser

__all__ = ["AdminUser"]
