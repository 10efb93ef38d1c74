"""
Subscription billing context
Subscriptions, plans and the daily charge scan
"""
