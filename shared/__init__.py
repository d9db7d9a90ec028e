"""
Shared Kernel

Value objects and base classes shared across the domain apps.
"""
