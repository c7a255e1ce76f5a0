"""
foliodb – run Domainfolio SQL migrations against the Supabase Management API.
"""
__version__ = "0.3.0"
