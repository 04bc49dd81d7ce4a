"""User models for authentication and account management.

This module defines the custom `User` model which extends Django's
`AbstractUser` with a unique email used as the sign-in identifier, a
storefront role, and the vendor reference used to tag order lines.
"""

from common.choices import UserRole
from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models


class User(AbstractUser):
    """Custom user with unique email and storefront role.

    Fields:
    - email: the sign-in identifier, unique at the database level (normalized).
    - role: customer, contractor, vendor or admin. Admins manage the catalog
      and every order.
    - is_verified: whether the account has been verified by staff.
    - vendor_ref: seller reference for vendor accounts.
    """

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=16, choices=UserRole.choices, default=UserRole.CUSTOMER, db_index=True)
    is_verified = models.BooleanField(default=False)
    vendor_ref = models.CharField(max_length=64, blank=True)
    phone = models.CharField(
        max_length=16,
        blank=True,
        validators=[RegexValidator(r"^\+?[1-9]\d{1,14}$", message="Use E.164 format (e.g., +212600000000)")],
        help_text="Primary contact number for the account in E.164 format",
    )

    def save(self, *args, **kwargs):
        """Normalize email and phone, then persist."""
        if self.email:
            self.email = self.email.strip().lower()
        if self.phone:
            self.phone = self.phone.strip()
        super().save(*args, **kwargs)

    @property
    def is_store_admin(self) -> bool:
        return self.role == UserRole.ADMIN or self.is_staff
