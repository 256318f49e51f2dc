"""
Backend package for the posts API.

This package provides a FastAPI application that exposes post CRUD over a
key-value blob store, plus a SQLAlchemy repository for the relational variant.
"""
