"""
Outvoice - Source Package

Invoicing for freelancers and small businesses: onboarding, email/Google
sign-in, and a list/detail UI for invoices stored in a hosted backend.

DESIGN PRINCIPLES:
1. The hosted backend does the real work; this package maps shapes
2. Backend is swappable (live Supabase or in-memory preview data)
3. Local state changes only after the backend confirmed the call
4. Errors reach the user verbatim; nothing is retried
"""

__version__ = "1.0.0"
__author__ = "Outvoice Team"
