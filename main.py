import json
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, NamedTuple, Optional

from fastapi import Body, Depends, FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.datastructures import UploadFile

from auth import (
    LOGIN_PAGE,
    AuthState,
    CookiePolicy,
    CredentialVerifier,
    TokenIssuer,
    get_auth_state,
    get_cookie_policy,
    get_credential_verifier,
    get_token_issuer,
    require_admin,
    require_admin_page,
)
from config import Settings, get_settings
from database import Database, close_database, get_database, serialize_document
from errors import AuthenticationError, AuthorizationError, NotFoundError, PortfolioError, ValidationError
from logging_config import get_logger, setup_logging
from middleware import ApiAliasMiddleware, RequestLoggingMiddleware
from migration import MigrationRunner, get_migration_runner
from catalog import PROJECT_CATALOG
from schemas import LoginRequest, VisitRequest
from services import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    ContactService,
    ProjectService,
    get_contact_service,
    get_project_service,
)
from uploads import UploadStore, get_upload_store
from visitors import DEDUPED, VisitorLog, get_visitor_log

settings = get_settings()
setup_logging(settings)
logger = get_logger("api")

# Form fields that carry several values in a multipart project submission
PROJECT_LIST_FIELDS = {"tags", "achievements", "images"}


# ==================
# FastAPI app config
# ==================
@asynccontextmanager
async def lifespan(app: FastAPI):
    os.makedirs(settings.upload_dir, exist_ok=True)
    logger.info("Portfolio admin API starting (environment=%s)", settings.environment)
    yield
    close_database()
    logger.info("Portfolio admin API stopped")


app = FastAPI(title="Portfolio Admin API", lifespan=lifespan)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
# Outermost, so /api/bo/... is rewritten before anything else sees the path
app.add_middleware(ApiAliasMiddleware)

app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


# ==============
# Error handlers
# ==============
@app.exception_handler(PortfolioError)
async def portfolio_error_handler(request: Request, exc: PortfolioError):
    if isinstance(exc, AuthorizationError) and exc.redirect_to:
        response = RedirectResponse(exc.redirect_to, status_code=302)
    else:
        response = JSONResponse(status_code=exc.status_code, content=exc.to_dict())
    if isinstance(exc, AuthorizationError) and exc.delete_cookie:
        response.delete_cookie(**exc.delete_cookie)
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = []
    for error in exc.errors():
        name = ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path"))
        if name and name not in fields:
            fields.append(name)
    error = ValidationError("Invalid request", fields=fields)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


# =========
# Utilities
# =========
def ok(data: Any = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def page_of(items: List[Dict[str, Any]], total: int, page: int, limit: int) -> Dict[str, Any]:
    return ok([serialize_document(item) for item in items], total=total, page=page, limit=limit)


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


class ProjectSubmission(NamedTuple):
    payload: Any
    images: List[UploadFile]


async def read_project_submission(request: Request) -> ProjectSubmission:
    """JSON body, or multipart form with a ``project`` JSON string and ``images`` files."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        images = [value for value in form.getlist("images") if isinstance(value, UploadFile)]
        if "project" in form:
            return ProjectSubmission({"project": form["project"]}, images)
        payload: Dict[str, Any] = {}
        for key in form.keys():
            values = [value for value in form.getlist(key) if isinstance(value, str)]
            if key == "images" or not values:
                continue
            payload[key] = values if key in PROJECT_LIST_FIELDS else values[-1]
        return ProjectSubmission(payload, images)

    body = await request.body()
    if not body.strip():
        return ProjectSubmission({}, [])
    try:
        return ProjectSubmission(json.loads(body), [])
    except ValueError:
        raise ValidationError("Malformed JSON in request body")


class AdminPages:
    """Finds the static admin HTML files in ADMIN_DIR."""

    def __init__(self, directory: str):
        self.directory = directory

    def response(self, filename: str) -> FileResponse:
        path = os.path.join(self.directory, filename)
        if not os.path.isfile(path):
            raise NotFoundError("Page", filename)
        return FileResponse(path, media_type="text/html")


def get_admin_pages(settings: Settings = Depends(get_settings)) -> AdminPages:
    return AdminPages(settings.admin_dir)


# ===========
# Admin pages
# ===========
@app.get("/")
def root():
    return RedirectResponse(LOGIN_PAGE, status_code=302)


@app.get("/test")
def test_database(database: Database = Depends(get_database)):
    connected = database.is_connected()
    collections = database.collection_names() if connected else []
    return {
        "backend": "running",
        "database": "connected" if connected else "not-available",
        "collections": collections[:10],
    }


@app.get("/admin/login")
def admin_login_page(state: AuthState = Depends(get_auth_state), pages: AdminPages = Depends(get_admin_pages)):
    if state.authenticated:
        return RedirectResponse("/admin", status_code=302)
    return pages.response("login.html")


@app.get("/admin/viewer")
def admin_viewer_page(pages: AdminPages = Depends(get_admin_pages)):
    return pages.response("index.html")


@app.get("/admin")
def admin_index_page(_: str = Depends(require_admin_page), pages: AdminPages = Depends(get_admin_pages)):
    return pages.response("index.html")


@app.get("/admin/create")
def admin_create_page(_: str = Depends(require_admin_page), pages: AdminPages = Depends(get_admin_pages)):
    return pages.response("create.html")


# ====
# Auth
# ====
@app.post("/api/auth/login")
def login(
    data: LoginRequest,
    response: Response,
    verifier: CredentialVerifier = Depends(get_credential_verifier),
    issuer: TokenIssuer = Depends(get_token_issuer),
    cookies: CookiePolicy = Depends(get_cookie_policy),
):
    if not verifier.verify(data.username, data.password):
        logger.warning("Admin login failed for username %r", (data.username or "").strip())
        raise AuthenticationError()
    identity = data.username.strip()
    token = issuer.issue(identity)
    cookies.set(response, token)
    logger.info("Admin login succeeded for %s", identity)
    return ok(message="Login successful", token=token)


@app.post("/api/auth/logout")
def logout(response: Response, cookies: CookiePolicy = Depends(get_cookie_policy)):
    cookies.revoke(response)
    return ok(message="Logged out")


@app.get("/api/auth/check")
def check_auth(
    response: Response,
    state: AuthState = Depends(get_auth_state),
    cookies: CookiePolicy = Depends(get_cookie_policy),
):
    if state.rejected:
        cookies.revoke(response)
    return ok(authenticated=state.authenticated)


# ========
# Projects
# ========
@app.get("/api/projects")
def list_projects(
    page: int = Query(DEFAULT_PAGE),
    limit: int = Query(DEFAULT_LIMIT),
    projects: ProjectService = Depends(get_project_service),
):
    items, total = projects.list(page, limit)
    return page_of(items, total, page, limit)


@app.get("/api/projects/{key}")
def get_project(key: str, projects: ProjectService = Depends(get_project_service)):
    return ok(serialize_document(projects.get(key)))


@app.post("/api/projects", status_code=201)
def create_project(
    _: str = Depends(require_admin),
    submission: ProjectSubmission = Depends(read_project_submission),
    projects: ProjectService = Depends(get_project_service),
    store: UploadStore = Depends(get_upload_store),
):
    projects.require_connection()
    images = store.save(submission.images)
    try:
        project = projects.create(submission.payload, images=images)
    except Exception:
        store.discard(images)
        raise
    return ok(serialize_document(project))


@app.put("/api/projects/{key}")
def update_project(
    key: str,
    _: str = Depends(require_admin),
    submission: ProjectSubmission = Depends(read_project_submission),
    projects: ProjectService = Depends(get_project_service),
    store: UploadStore = Depends(get_upload_store),
):
    projects.get(key)
    images = store.save(submission.images)
    try:
        project = projects.update(key, submission.payload, images=images)
    except Exception:
        store.discard(images)
        raise
    return ok(serialize_document(project))


@app.delete("/api/projects/{key}")
def delete_project(
    key: str,
    _: str = Depends(require_admin),
    projects: ProjectService = Depends(get_project_service),
):
    projects.delete(key)
    return ok(message="Project deleted")


@app.get("/api/projects/{key}/files")
def list_project_files(
    key: str,
    request: Request,
    projects: ProjectService = Depends(get_project_service),
    store: UploadStore = Depends(get_upload_store),
):
    return ok(store.project_files(projects.get(key), str(request.base_url)))


@app.get("/api/projects/{key}/files/{filename}")
def download_project_file(
    key: str,
    filename: str,
    projects: ProjectService = Depends(get_project_service),
    store: UploadStore = Depends(get_upload_store),
):
    path = store.resolve_file(projects.get(key), filename)
    if path is None:
        raise NotFoundError("File", filename)
    return FileResponse(path, filename=filename)


# ========
# Visitors
# ========
@app.post("/api/visitors")
def log_visit(
    request: Request,
    visit: Optional[VisitRequest] = Body(None),
    visitors: VisitorLog = Depends(get_visitor_log),
):
    visit = visit or VisitRequest()
    outcome = visitors.record_visit(
        visit.ip or client_ip(request),
        visit.user_agent or request.headers.get("user-agent"),
        visit.path,
    )
    return ok(message="Visit recorded", deduplicated=outcome == DEDUPED)


@app.get("/api/visitors/stats")
def visitor_stats(visitors: VisitorLog = Depends(get_visitor_log)):
    return ok(**visitors.stats())


@app.get("/api/visitors")
def list_visitors(
    page: int = Query(DEFAULT_PAGE),
    limit: int = Query(DEFAULT_LIMIT),
    visitors: VisitorLog = Depends(get_visitor_log),
):
    items, total = visitors.list(page, limit)
    return page_of(items, total, page, limit)


# ========
# Contacts
# ========
@app.post("/api/contacts", status_code=201)
def create_contact(
    payload: Optional[Dict[str, Any]] = Body(None),
    contacts: ContactService = Depends(get_contact_service),
):
    return ok(serialize_document(contacts.create(payload or {})))


@app.get("/api/contacts")
def list_contacts(
    page: int = Query(DEFAULT_PAGE),
    limit: int = Query(DEFAULT_LIMIT),
    _: str = Depends(require_admin),
    contacts: ContactService = Depends(get_contact_service),
):
    items, total = contacts.list(page, limit)
    return page_of(items, total, page, limit)


@app.put("/api/contacts/{key}/read")
def mark_contact_read(
    key: str,
    _: str = Depends(require_admin),
    contacts: ContactService = Depends(get_contact_service),
):
    return ok(serialize_document(contacts.mark_read(key)))


@app.delete("/api/contacts/{key}")
def delete_contact(
    key: str,
    _: str = Depends(require_admin),
    contacts: ContactService = Depends(get_contact_service),
):
    contacts.delete(key)
    return ok(message="Contact deleted")


# =========
# Migration
# =========
@app.post("/api/migrate/projects")
def migrate_projects(
    _: str = Depends(require_admin),
    runner: MigrationRunner = Depends(get_migration_runner),
):
    result = runner.run(PROJECT_CATALOG)
    return ok(message="Migration complete", **result)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "3005")))
