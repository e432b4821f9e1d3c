"""
HTTP middleware.

Responsibilities:
- Attach security headers to every response.
- Reject oversized request bodies and throttle clients per address.
- Turn unhandled exceptions into JSON error responses and log requests.
- Sanitise free-form user input at the HTTP boundary.
"""
