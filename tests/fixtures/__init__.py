"""Test fixtures module."""

from .surveys import (
    Account,
    AppSettings,
    Budget,
    Checkout,
    Damage,
    Household,
    Inventory,
    Theme,
)

__all__ = [
    "Account",
    "AppSettings",
    "Budget",
    "Checkout",
    "Damage",
    "Household",
    "Inventory",
    "Theme",
]
