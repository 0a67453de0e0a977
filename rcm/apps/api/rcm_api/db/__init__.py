"""Data access: Supabase table repositories and the optional direct Postgres engine."""
