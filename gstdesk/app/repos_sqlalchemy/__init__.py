"""SQLAlchemy-backed repository functions.

Every helper takes the request ``Session`` and leaves committing to the
caller, so a route can group several writes into one transaction.
"""
