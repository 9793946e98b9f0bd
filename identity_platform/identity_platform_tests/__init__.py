"""
auth_service tests

Covers the authentication service package:

- HTTP endpoints through FastAPI's TestClient (`test_auth.py`)
- AuthService workflow against the in-memory store (`test_service.py`)
- SQLAlchemy credential store and database init (`test_sql_store.py`)
- Token issuance and signing settings (`test_tokens.py`)
- Request validation functions (`test_validators.py`)
"""
