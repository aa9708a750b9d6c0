"""Routes package initializer for the Shared Expenses API.

Blueprints are defined in sibling modules (health, auth, users, groups, members, expenses, balances)
and registered by create_app() in shared_expenses/__init__.py.
"""
