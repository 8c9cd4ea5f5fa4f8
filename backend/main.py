# backend/main.py
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv()

from config import settings
from utils.auth import resolve_session_user
from utils.backend_client import BackendError
from utils.errors import backend_exception_handler, http_exception_handler, validation_exception_handler
from utils.session_gate import SessionGateMiddleware

# Import routerów
from routes.auth import router as auth_router
from routes.users import router as users_router
from routes.dashboard import router as dashboard_router
from routes.products import router as products_router
from routes.categories import router as categories_router
from routes.customers import router as customers_router
from routes.suppliers import router as suppliers_router
from routes.inventory import router as inventory_router
from routes.sell import router as sell_router
from routes.orders import router as orders_router
from routes.reports import router as reports_router
from routes.settings import router as settings_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def create_app(session_resolver=resolve_session_user) -> FastAPI:
    app = FastAPI(title="Depozit API", version="1.0.0")

    # CORS: local frontend plus the deployed one, when configured
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    if settings.FRONTEND_URL:
        origins.append(settings.FRONTEND_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SessionGateMiddleware, resolve_user=session_resolver)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(BackendError, backend_exception_handler)

    # Rejestracja routerów
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(dashboard_router)
    app.include_router(products_router)
    app.include_router(categories_router)
    app.include_router(customers_router)
    app.include_router(suppliers_router)
    app.include_router(inventory_router)
    app.include_router(sell_router)
    app.include_router(orders_router)
    app.include_router(reports_router)
    app.include_router(settings_router)

    # Login screen; signed-in callers never get here (the session gate redirects them)
    @app.get("/")
    def read_root():
        return {"message": "Depozit API działa!", "login": "/login"}

    return app


app = create_app()
