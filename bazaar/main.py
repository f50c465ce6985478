import logging
from typing import List

from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from . import crud, schemas
from .auth import Identity
from .config import get_settings
from .db import Base, engine, get_db
from .dependencies import get_current_identity, require_role
from .errors import MarketplaceError
from .models import ROLE_SELLER

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create tables if not existing. In production, use Alembic.
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Matrika Bazaar API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # malformed input is a client error like any other business-rule failure
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Matrika Bazaar Backend API Running"


@app.get("/health")
async def health():
    return {"status": "ok"}


# Handlers below are plain functions: they block on the DB session and on
# password hashing, so FastAPI runs them in its threadpool.

@app.post("/api/register", response_model=schemas.MessageResponse, status_code=201)
def register(user: schemas.UserCreate, db: Session = Depends(get_db)):
    crud.create_user(db, user)
    return {"message": "User registered successfully"}


@app.post("/api/login", response_model=schemas.LoginResponse)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    token, user = crud.authenticate(db, payload.email, payload.password)
    # UserRead leaves the password hash out of the response
    return {"token": token, "user": user}


@app.post("/api/products", response_model=schemas.ProductRead, status_code=201)
def create_product(
    product: schemas.ProductCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_role(ROLE_SELLER, "Only sellers can add products")),
):
    return crud.create_product(db, identity, product)


@app.get("/api/products", response_model=List[schemas.ProductRead])
def list_products(db: Session = Depends(get_db)):
    return crud.list_products(db)


@app.post("/api/orders", response_model=schemas.OrderPlaced, status_code=201)
def place_order(
    order: schemas.OrderCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    created = crud.place_order(db, identity, order)
    return {"message": "Order placed successfully", "order": created}


@app.get("/api/orders", response_model=List[schemas.OrderDetail])
def list_my_orders(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return crud.list_orders_for_user(db, identity.id)


def run():
    import uvicorn

    logger.info("Server running on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
