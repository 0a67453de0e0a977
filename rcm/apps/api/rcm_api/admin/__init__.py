"""Admin operations: naming rules, validation, seeding and cascading deletes."""
