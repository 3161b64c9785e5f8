"""
Products table storage.

The SQLAlchemy-backed store and its in-memory stand-in share one table
definition and are both driven through BatchUpserter.
"""
