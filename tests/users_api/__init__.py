"""
Users API Testing Suite

Exercises the /users endpoints against an in-memory async MongoDB collection.

Test Categories:
- CRUD Operations: create, read, update and delete by id
- Query Operations: name/food lookups, bulk create, bulk delete, chained search
- Error Handling: malformed identifiers, validation failures, driver faults
"""

__version__ = "1.0.0"
