"""Infrastructure layer.

Configuration, database session management, logging and the object
store client.
"""
