"""
Domain layer: entities, value logic and exceptions.
"""
