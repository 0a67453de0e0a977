"""RCM Admin API - tenant profile and user administration over Supabase."""

__version__ = "0.3.0"
