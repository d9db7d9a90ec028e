"""Finances app package.

Records gateway interactions and confirms booking payments through
Paystack, either by verifying a reference or by receiving a webhook.
"""
