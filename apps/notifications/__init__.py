"""Notifications app package.

Sends booking emails to the guest and to the site administrators once a
payment has been confirmed. Delivery runs in Celery tasks.
"""
