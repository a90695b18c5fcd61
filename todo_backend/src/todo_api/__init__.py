"""
FastAPI Todo Backend package.

The application lives in `todo_api.main:app`; the task analyzer in
`todo_api.analyzer` has no web dependencies and can be imported on its own.
"""
