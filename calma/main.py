import logging

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from calma.config import get_settings
from calma.controllers.availability import router as availability_router
from calma.controllers.bookings import router as bookings_router
from calma.controllers.calendar import router as calendar_router
from calma.controllers.feedback import router as feedback_router
from calma.controllers.health import router as health_router
from calma.controllers.meeting_types import router as meeting_types_router
from calma.controllers.public import router as public_router
from calma.controllers.users import router as users_router
from calma.errors import register_exception_handlers
from calma.lifespan import lifespan
from calma.middleware import HTTPLogMiddleware

settings = get_settings()

app = FastAPI(title="Calma Scheduling API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_origin_regex=settings.cors.origins_regex or None,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.debug.request:
    logging.getLogger("calma.http").setLevel(logging.DEBUG)
    app.add_middleware(HTTPLogMiddleware)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(users_router)
app.include_router(availability_router)
app.include_router(meeting_types_router)
app.include_router(bookings_router)
app.include_router(public_router)
app.include_router(calendar_router)
app.include_router(feedback_router)
