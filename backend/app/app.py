"""FastAPI application."""

import argparse
import logging
import os
from typing import Dict

from dotenv import load_dotenv

load_dotenv(os.getenv("DOTENV_PATH", "../../.env"))

from fastapi import FastAPI, Request, status  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from dealscout.configs import settings  # noqa: E402
from dealscout.controllers.search_controllers import search_router  # noqa: E402
from dealscout.logger_config import configure_logging, get_logger  # noqa: E402
from dealscout.services.product_search.errors import (  # noqa: E402
    PlanExecutionError,
    ProductSearchError,
    ValidationError,
)

configure_logging()
logger = get_logger("dealscout.api")

GENERIC_ERROR_MESSAGE = "Internal server error."


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "message": message}
    )


async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Rejected request to %s: %s", request.url.path, exc.message)
    return _error(status.HTTP_400_BAD_REQUEST, exc.message)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request.") if errors else "Invalid request."
    logger.info("Rejected malformed body on %s: %s", request.url.path, errors)
    return _error(status.HTTP_400_BAD_REQUEST, message)


async def handle_plan_execution_error(
    request: Request, exc: PlanExecutionError
) -> JSONResponse:
    logger.error("Plan execution failed on %s: %s", request.url.path, exc.__cause__)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


async def handle_product_search_error(
    request: Request, exc: ProductSearchError
) -> JSONResponse:
    logger.error("Request to %s failed: %s", request.url.path, exc.message)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error on %s", request.url.path)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


def create_app() -> FastAPI:
    """Build the API with its router, CORS policy and error mapping."""
    app = FastAPI(
        title="DealScout API",
        root_path=settings.ROOT_PATH_BACKEND,
        description="Product search and deal ranking over Amazon.in and Flipkart",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(search_router)

    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(PlanExecutionError, handle_plan_execution_error)
    app.add_exception_handler(ProductSearchError, handle_product_search_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/", response_description="Api healthcheck")  # type: ignore[misc]
    async def index() -> Dict[str, str]:
        """Define a route for handling HTTP GET requests to the root URL ("/")."""
        return {"status": "ok"}

    return app


logger.info("Starting FastAPI application...")
app = create_app()


if __name__ == "__main__":
    import uvicorn

    parser = argparse.ArgumentParser()
    parser.add_argument("--host", required=True, help="Application host.")
    parser.add_argument("--port", required=True, help="Application port.")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development purposes.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    uvicorn.run("app:app", host=args.host, port=int(args.port), reload=args.reload)
