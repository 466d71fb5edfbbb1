"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Category, Priority)
- errors.py: ValidationError / NotFoundError / PersistenceError
- kv_store.py: key-value backends (SQLite, JSON file, memory)
- task_persistence.py: whole-collection JSON load/save under one key
- task_store.py: in-memory collection + write-through mutations
- async_store.py: asyncio facade that serializes mutations
- task_query.py: pure filter/sort pipeline
- task_view.py: display view-models (labels, relative deadlines)
- task_api.py: small high-level helpers used by presentation layers
"""
