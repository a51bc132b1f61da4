"""
Tasks API package.

FastAPI service persisting a flat list of tasks and exposing them under
/api/tasks. Build an application with ``tasks_api.main.create_app``.
"""
