"""
Accounts and sessions.

Responsibilities:
- Keep an in-process user store with bcrypt password hashes.
- Hold each user's profile (display name, default dietary restrictions).
- Provide FastAPI dependencies that read the logged-in user from the session.
"""
