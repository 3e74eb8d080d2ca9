from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

import app.db.base  # noqa: F401  (registers every model)
from app.api.routes import auth, apartments, bookings, payments, documents, offers, admin
from app.services.errors import BookingError

# ⭐ Import logging system
from app.core.logging_config import get_logger

logger = get_logger()

app = FastAPI(
    title="Apartment Booking API",
    version="1.0.0",
    description="API for Apartment Holds, Payments, Offers, Identity Documents & Admin Back-office"
)


# ⭐ Request Logging Middleware
@app.middleware("http")
async def log_requests(request, call_next):
    logger.info(f"REQUEST: {request.method} {request.url}")

    try:
        response = await call_next(request)
        logger.info(f"RESPONSE: {response.status_code} {request.url}")
        return response

    except Exception as e:
        logger.error(f"ERROR: {request.url} -> {str(e)}")
        raise e


# ⭐ Domain errors -> structured JSON
@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


# ⭐ CORS (important for frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Can restrict later for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------- ROUTERS REGISTER ORDER MATTERS --------
app.include_router(auth.router)
app.include_router(apartments.router)
app.include_router(bookings.router)
app.include_router(payments.router)
app.include_router(documents.router)
app.include_router(offers.router)
app.include_router(admin.router)


@app.get("/", tags=["Root"])
def root():
    return {"message": "Backend running successfully"}
