"""Easy Meal API: AI recipe generation, accounts and a personal recipe box."""
