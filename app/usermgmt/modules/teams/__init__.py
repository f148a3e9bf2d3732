"""
Team administration.

- List, view, add and edit teams
- Add and remove team members (full member list is resent on every change)
- Team type is only editable by callers the platform allows to create teams
"""
