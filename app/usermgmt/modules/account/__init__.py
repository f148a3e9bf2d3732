"""
The caller's own account: my details, phone number, password.
"""
