"""Data access managers for the workspace service.

Each module provides async functions that encapsulate queries and business
rules.  Managers accept ``AsyncSession`` as a parameter and raise domain
exceptions (``LookupError``, ``PermissionError``, ``ValueError``), never
HTTP exceptions -- that translation is the router's responsibility.
"""
