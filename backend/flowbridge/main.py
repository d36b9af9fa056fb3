import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import flowbridge
from flowbridge.api.routes import router
from flowbridge.config import CORS_ORIGINS, LOG_LEVEL

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Flowbridge Diagram Converter",
    version=flowbridge.__version__,
)

# Middleware before routes
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
