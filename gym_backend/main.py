import logging
from collections import defaultdict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from gym_backend.core import config
from gym_backend.core.errors import ConcurrencyConflict, NotFound, ValidationFailure
from gym_backend.core.logging import setup_logging
from gym_backend.database import SessionLocal, create_schema
from gym_backend.routes import (
    auth_routes,
    dashboard_routes,
    member_routes,
    membership_type_routes,
    trainer_routes,
)
from gym_backend.seed import seed_identity_store

setup_logging()
config.validate_runtime_config()

app = FastAPI(title='Gym Membership API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


def validation_error_body(errors: dict[str, list[str]]) -> dict:
    return {'detail': 'Validation failed.', 'errors': errors}


@app.on_event('startup')
def initialize_database() -> None:
    try:
        create_schema()
        db = SessionLocal()
        try:
            seed_identity_store(db)
        finally:
            db.close()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, list[str]] = defaultdict(list)
    for error in exc.errors():
        location = [str(part) for part in error.get('loc', ()) if part not in ('body', 'query', 'path')]
        field = location[-1] if location else 'body'
        errors[field].append(error.get('msg', 'Invalid value.'))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=validation_error_body(dict(errors)))


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=validation_error_body(exc.errors))


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={'detail': exc.message})


@app.exception_handler(ConcurrencyConflict)
async def concurrency_conflict_handler(request: Request, exc: ConcurrencyConflict):
    logger.error('Concurrency conflict on %s %s: %s', request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'The record was modified by another request.'},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'An unexpected error occurred.'},
    )


@app.get('/')
def root():
    return {'status': 'Gym Membership API Running'}


app.include_router(auth_routes.router, prefix='/api/auth')
app.include_router(member_routes.router, prefix='/api/members')
app.include_router(trainer_routes.router, prefix='/api/trainers')
app.include_router(membership_type_routes.router, prefix='/api/membershiptypes')
app.include_router(dashboard_routes.router, prefix='/api/dashboard')
