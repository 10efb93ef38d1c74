"""
Shared Infrastructure Layer
Database, messaging, scheduling and observability
"""
