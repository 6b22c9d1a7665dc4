import logging

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from api.server import app  # noqa: E402
from shared.config import settings  # noqa: E402

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print(f"Starting MapCompare Route Comparison API on port {settings.PORT}...")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
