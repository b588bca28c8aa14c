import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vcard_export.conf.config import settings
from vcard_export.routes import vcard

logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)

app = FastAPI(
    title=settings.app_title,
    description="API for exporting contacts as vCard 3.0 and 4.0 files.",
    version="0.1.0",
)

origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(vcard.router)


@app.get("/")
async def read_root():
    """
        Root endpoint for the vCard Export API.

        Returns:
            dict: A welcome message.
        """
    return {"message": "Welcome to the vCard Export API!"}
