"""Properties app package.

This app holds the property listings and their per-day availability
overrides that feed the booking calendar.
"""
