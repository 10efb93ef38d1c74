"""
Shared Kernel
Domain contracts, application contracts and infrastructure adapters
"""
