"""Infrastructure layer - external cryptography adapters.

The domain layer reaches authenticated encryption only through the
DataProtector interface defined here.
"""
