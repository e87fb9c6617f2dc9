"""
Marketplace API

ASGI entry point: ``uvicorn marketplace.main:app`` or
``gunicorn marketplace.main:app -c gunicorn.conf.py``.
"""

from marketplace.config import get_settings
from marketplace.serving.api import create_api_app

settings = get_settings()

app = create_api_app(settings)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
