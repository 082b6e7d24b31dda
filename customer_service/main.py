import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .db import create_db_engine, init_db
from .errors import AuthenticationError, BankError, InvalidCustomerIdError
from .logging_config import get_logger, setup_logging
from .schemas import CustomerIn, CustomerOut, LoginIn, MovementIn, MovementOut, ReportOut, TokenOut
from .security import CredentialService
from .service import AuthService, CustomerService
from .store import CustomerStore, SQLCustomerStore

logger = get_logger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["auth"])
customer_router = APIRouter(prefix="/customers", tags=["customers"])


def get_customer_service(request: Request) -> CustomerService:
    return request.app.state.customer_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_user(request: Request, auth: Optional[str] = Header(default=None, alias="Authorization")) -> Dict[str, Any]:
    if not auth or not auth.lower().startswith("bearer "):
        raise AuthenticationError()
    token = auth.split(" ", 1)[1]
    return request.app.state.credentials.decode_token(token)


def valid_customer_id(customer_id: str) -> str:
    try:
        return str(uuid.UUID(customer_id))
    except ValueError:
        raise InvalidCustomerIdError()


@auth_router.post("/signup", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def signup(body: CustomerIn, auth: AuthService = Depends(get_auth_service)):
    return auth.signup(body)


@auth_router.post("/login", response_model=TokenOut)
def login(body: LoginIn, auth: AuthService = Depends(get_auth_service)):
    return TokenOut(access_token=auth.login(body.email, body.password))


@customer_router.get("", response_model=List[CustomerOut])
def find_customers(user=Depends(get_user), customers: CustomerService = Depends(get_customer_service)):
    return customers.find_customers()


@customer_router.get("/{customer_id}", response_model=CustomerOut)
def find_customer(
    user=Depends(get_user),
    customer_id: str = Depends(valid_customer_id),
    customers: CustomerService = Depends(get_customer_service),
):
    return customers.find_by_id(customer_id)


@customer_router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(body: CustomerIn, user=Depends(get_user), customers: CustomerService = Depends(get_customer_service)):
    return customers.create(body)


@customer_router.post("/{customer_id}/movements", response_model=MovementOut, status_code=status.HTTP_201_CREATED)
def add_movement(
    body: MovementIn,
    user=Depends(get_user),
    customer_id: str = Depends(valid_customer_id),
    customers: CustomerService = Depends(get_customer_service),
):
    return customers.add_movement(customer_id, body.type, body.amount)


@customer_router.get("/{customer_id}/movements", response_model=List[MovementOut])
def find_movements(
    user=Depends(get_user),
    customer_id: str = Depends(valid_customer_id),
    customers: CustomerService = Depends(get_customer_service),
):
    return customers.find_movements(customer_id)


@customer_router.get("/{customer_id}/reports", response_model=List[ReportOut])
def reports(
    user=Depends(get_user),
    customer_id: str = Depends(valid_customer_id),
    customers: CustomerService = Depends(get_customer_service),
):
    return [ReportOut(type=type_, total=total) for type_, total in customers.reports(customer_id)]


async def handle_bank_error(request: Request, exc: BankError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


async def handle_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app(settings: Optional[Settings] = None, store: Optional[CustomerStore] = None) -> FastAPI:
    """Build the application with its collaborators wired in.

    Run with ``uvicorn customer_service.main:create_app --factory``.
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.log_format)

    if store is None:
        engine = create_db_engine(settings.database_url)
        init_db(engine)
        store = SQLCustomerStore(engine)

    credentials = CredentialService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    customer_service = CustomerService(store, credentials, max_attempts=settings.movement_max_attempts)

    app = FastAPI(title="customer-service")
    app.state.settings = settings
    app.state.credentials = credentials
    app.state.customer_service = customer_service
    app.state.auth_service = AuthService(customer_service, credentials, hide_unknown_email=settings.hide_unknown_email)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(BankError, handle_bank_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.include_router(auth_router)
    app.include_router(customer_router)

    logger.info("customer-service ready (database %s)", settings.database_url.split("://", 1)[0])
    return app
