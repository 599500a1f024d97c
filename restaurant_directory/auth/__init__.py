"""
Authentication.

Responsibilities:
- Sign users up with bcrypt-hashed passwords.
- Verify credentials and issue one-hour JWT bearer tokens.
- Guard protected routes by decoding the bearer token on each request.
"""
