"""
auth — credential handling for the user-account service.

Provides:
  • Password hashing and verification (bcrypt, salted per record)
  • Login token creation & verification (HMAC-SHA256 signed payload)
"""
