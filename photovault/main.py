import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from photovault.database import Base, engine  # noqa: E402
from photovault.routers.login import router as login_router  # noqa: E402
from photovault.routers.photos import router as photos_router  # noqa: E402
from photovault.routers.setup import router as setup_router  # noqa: E402

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format=LOG_FORMAT,
)

# Ensure database tables exist
Base.metadata.create_all(bind=engine)

app = FastAPI(title="photovault")

app.include_router(login_router)
app.include_router(photos_router)
app.include_router(setup_router)

# Reminder: JWT_SECRET_KEY and CREDENTIALS_SECRET must be set in the environment

__all__ = ["app"]
