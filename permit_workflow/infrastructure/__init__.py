"""Infrastructure: persistence (SQLAlchemy) and collaborator implementations."""
