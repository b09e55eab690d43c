"""Map domain errors onto HTTP responses.

Protean's own handlers are registered first. The handlers below are added on
top and pin down the status code of every error the inventory context raises.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from inventory.exceptions import DuplicateRecordError, InsufficientInventoryError


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": exc.messages})

    @app.exception_handler(ObjectNotFoundError)
    async def not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
        # Plain ProteanException: the payload is the first positional argument
        return JSONResponse(status_code=404, content={"error": exc.args[0] if exc.args else str(exc)})

    @app.exception_handler(DuplicateRecordError)
    async def duplicate_record(request: Request, exc: DuplicateRecordError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"error": exc.messages})

    @app.exception_handler(InsufficientInventoryError)
    async def insufficient_inventory(request: Request, exc: InsufficientInventoryError) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={
                "error": exc.messages,
                "product_id": exc.product_id,
                "warehouse_location": exc.warehouse_location,
                "requested": exc.requested,
                "available": exc.available,
                "shortfall": exc.shortfall,
            },
        )

    @app.exception_handler(ExpectedVersionError)
    async def concurrent_modification(request: Request, exc: ExpectedVersionError) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"error": {"_entity": ["Record was modified concurrently, retry the request"]}},
        )
