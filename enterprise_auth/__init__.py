"""
Enterprise Auth Service

Account provisioning and login authorization on top of Supabase
"""

__version__ = "1.0.0"
