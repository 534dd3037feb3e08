"""
Common library for reusable infrastructure components.

- database: Async MongoDB connection with Motor
- auth: Pluggable identity providers (JWT, Firebase)
- utils: Standard responses and exceptions
- config: Base settings class
"""
