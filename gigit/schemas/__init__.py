"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: Table definitions (gigit.models)
- Schemas: API contract (what client sends/receives)

All schemas live in gigit.schemas.schemas.
"""
