"""
Adapters Django: ORM, API JSON, Unit of Work e eventos.
"""
