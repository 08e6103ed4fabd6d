"""
FastAPI Task Tracker backend package.

The application instance lives in ``src.task_api.main``; stores, service and
schemas can be imported without building the app.
"""
