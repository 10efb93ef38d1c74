"""
Subscription Infrastructure Layer
ORM models, SQLAlchemy repositories and wiring
"""
