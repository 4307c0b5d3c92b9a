import uvicorn

from .config import settings
from .main import create_app

if __name__ == "__main__":
    uvicorn.run(create_app(), host=settings.host, port=settings.port, reload=False)
