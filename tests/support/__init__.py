"""Mock result sets and sample application code shared by the tests.

Test code only; nothing here is imported by the library.
"""
