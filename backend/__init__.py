"""FastAPI backend for the marketing relay

Exposes RunwayML generation tasks, OpenRouter-powered marketing forms and
image hosting to the frontend through a small JSON API.
"""

__version__ = "1.0.0"
