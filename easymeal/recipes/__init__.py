"""
Recipe box.

Responsibilities:
- Validate recipes created by hand or saved from AI generation.
- Store each user's recipes in process memory, newest first.
"""
