from __future__ import annotations

import time

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events, record_event
from .auth.dependencies import require_admin, require_user
from .auth.models import LoginRequest
from .auth.users import authenticate
from .config import DEFAULT_CONFIG
from .objects.storage import ObjectNotFoundError, ObjectStorage
from .projects.file_store import ProjectFileStore
from .projects.models import (
    ProjectUploadRequest,
    ProjectUploadResponse,
    UploadedProject,
    VisibilityUpdate,
)
from .recommendations.engine import fetch_recommended, get_user_recommendations
from .recommendations.models import Project, RecommendationResponse, RecommendedRow
from .store.bounded import bounded_call
from .store.cache import CachedDocumentStore
from .store.memory import InMemoryDocumentStore
from .videos.catalog import Video, get_all_videos, get_video, get_videos_by_category

app = FastAPI(title="SoarTV API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_CONFIG.session_secret)

_store: CachedDocumentStore | None = None
_project_store: ProjectFileStore | None = None
_object_storage: ObjectStorage | None = None


# ── Collaborators (overridable via app.dependency_overrides) ─────────────


def get_store() -> CachedDocumentStore:
    global _store
    if _store is None:
        _store = CachedDocumentStore(InMemoryDocumentStore.from_seed_file(DEFAULT_CONFIG.seed_path))
    return _store


def get_project_store() -> ProjectFileStore:
    global _project_store
    if _project_store is None:
        _project_store = ProjectFileStore(DEFAULT_CONFIG.projects_file)
    return _project_store


def get_object_storage() -> ObjectStorage:
    global _object_storage
    if _object_storage is None:
        _object_storage = ObjectStorage(
            DEFAULT_CONFIG.objects_dir,
            DEFAULT_CONFIG.session_secret,
            DEFAULT_CONFIG.upload_url_ttl,
        )
    return _object_storage


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/videos", response_model=list[Video])
def videos() -> list[Video]:
    return get_all_videos()


@app.get("/api/videos/category/{category}", response_model=list[Video])
def videos_by_category(category: str) -> list[Video]:
    return get_videos_by_category(category)


@app.get("/api/videos/{video_id}", response_model=Video)
def video(video_id: int) -> Video:
    found = get_video(video_id)
    if found is None:
        raise HTTPException(status_code=404, detail="Video not found")
    return found


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Recommendation endpoints ─────────────────────────────────────────────


@app.get("/api/recommendations", response_model=RecommendationResponse)
async def recommendations(
    user: dict = Depends(require_user),
    store: CachedDocumentStore = Depends(get_store),
) -> RecommendationResponse:
    start_time = time.time()
    response = await get_user_recommendations(store, user["uid"])

    profile = await bounded_call(store.get_profile(user["uid"]), None, label="analytics profile lookup")
    record_event("recommendations", {
        "uid": user["uid"],
        "genres": profile.genres if profile else [],
        "users_returned": len(response.users),
        "projects_returned": len(response.projects),
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
    })
    return response


@app.get("/api/recommended", response_model=RecommendedRow)
async def recommended_row(
    user: dict = Depends(require_user),
    store: CachedDocumentStore = Depends(get_store),
) -> RecommendedRow:
    profile = await bounded_call(store.get_profile(user["uid"]), None, label="recommended row profile lookup")
    genres = profile.genres if profile else []
    projects = await fetch_recommended(store, genres)
    record_event("recommended_row", {"uid": user["uid"], "genres": genres, "results": len(projects)})
    return RecommendedRow(genres=genres, projects=projects)


# ── Uploads ──────────────────────────────────────────────────────────────


@app.post("/api/objects/upload")
def object_upload_url(
    request: Request,
    objects: ObjectStorage = Depends(get_object_storage),
) -> dict:
    object_id, token = objects.new_upload()
    url = request.url_for("put_object", object_id=object_id).include_query_params(token=token)
    return {"uploadURL": str(url)}


@app.put("/objects/uploads/{object_id}", name="put_object")
async def put_object(
    object_id: str,
    token: str,
    request: Request,
    objects: ObjectStorage = Depends(get_object_storage),
) -> dict:
    if not objects.verify_upload_token(object_id, token):
        raise HTTPException(status_code=403, detail="Invalid or expired upload token")
    object_path = objects.save(object_id, await request.body())
    return {"objectPath": object_path}


@app.get("/objects/{object_path:path}")
def get_object(
    object_path: str,
    objects: ObjectStorage = Depends(get_object_storage),
):
    try:
        return FileResponse(str(objects.resolve(object_path)))
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail="Object not found")


@app.put("/api/projects/upload", response_model=ProjectUploadResponse)
def upload_project(
    body: ProjectUploadRequest,
    projects: ProjectFileStore = Depends(get_project_store),
) -> ProjectUploadResponse:
    if not body.video_url or not body.title or not body.user_id:
        raise HTTPException(status_code=400, detail="Missing required fields")
    project = projects.add_project(
        body.user_id,
        body.title,
        body.video_url,
        body.description or "",
    )
    return ProjectUploadResponse(success=True, project=project)


@app.get("/api/projects/user/{user_id}", response_model=list[UploadedProject])
def user_projects(
    user_id: str,
    projects: ProjectFileStore = Depends(get_project_store),
) -> list[UploadedProject]:
    return projects.get_user_projects(user_id)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())


@app.get("/cache/stats")
def cache_stats(
    user: dict = Depends(require_admin),
    store: CachedDocumentStore = Depends(get_store),
) -> dict:
    return store.get_cache_stats()


@app.post("/admin/projects/{project_id}/visibility", response_model=Project)
def moderate_project(
    project_id: str,
    body: VisibilityUpdate,
    user: dict = Depends(require_admin),
    store: CachedDocumentStore = Depends(get_store),
) -> Project:
    documents = store.inner
    if not isinstance(documents, InMemoryDocumentStore):
        raise HTTPException(status_code=501, detail="Moderation not supported by this store")
    updated = documents.set_visibility(project_id, body.visibility)
    if updated is None:
        raise HTTPException(status_code=404, detail="Project not found")
    store.clear()
    return updated


# ── Static / SPA fallback ────────────────────────────────────────────────


app.mount("/static", StaticFiles(directory=str(DEFAULT_CONFIG.static_dir)), name="static")


@app.get("/")
def root():
    return FileResponse(str(DEFAULT_CONFIG.static_dir / "index.html"))


@app.get("/{full_path:path}", include_in_schema=False)
def spa_fallback(full_path: str):
    return FileResponse(str(DEFAULT_CONFIG.static_dir / "index.html"))
