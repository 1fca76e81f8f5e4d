"""
account_service tests

Covers the backend pieces of the account service:

- Password hashing and signup password rules (`auth.py`, `password_policy.py`)
- JWT issuing and parsing (`tokens.py`)
- Signup/login flow and the auth gate (`service.py`, `gate.py`)
- Error taxonomy, database setup and logging

Run from the repository root with `pytest`.
"""
