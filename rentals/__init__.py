"""Rental listings service backed by Supabase."""

__version__ = "1.0.0"
