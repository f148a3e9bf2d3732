"""
User administration (System Admin only).

- Search users by name or email (three characters minimum)
- Add, edit, unlock and delete users
- Resend account confirmation emails
"""
