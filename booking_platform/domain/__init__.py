"""
Domain packages.

Each domain keeps database access in ``repository.py``, business rules in
``service.py``, Pydantic models in ``schemas.py`` and FastAPI endpoints in
``router.py``.
"""
