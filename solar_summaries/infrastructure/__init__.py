"""
Infrastructure adapters: Postgres datastore and Clerk identity provider.
"""
