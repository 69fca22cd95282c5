import logging

import uvicorn

from . import server
from .config import HOST, LOG_FORMAT, LOG_LEVEL, PORT

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    uvicorn.run(
        server.app,
        host=HOST,
        port=PORT,
        reload=False,
    )
