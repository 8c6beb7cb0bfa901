"""Use cases: workflow progression, officer actions, queries."""
