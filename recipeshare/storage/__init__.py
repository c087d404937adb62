"""
Document storage for users and recipes.

Responsibilities:
- Define the narrow store interfaces the services depend on.
- Provide an in-memory backend for local runs and tests.
- Provide a MongoDB backend selected when ``DB_URL`` is configured.
"""
