"""Bookings app package.

This app holds the booking model and the availability ledger that decides
whether a property can be booked for a stay. Booking creation and payment
confirmation both run their check under a per-property row lock inside a
database transaction.
"""
