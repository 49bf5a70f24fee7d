"""
Integration Test Fixtures

In-process FastAPI stub of the studio API. State is explicit and
deterministic: fixed ids, no random generation.
"""

from collections import Counter
from typing import Dict, List

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response

from studio import ClientConfig, StudioClient
from studio.config import TransportConfig
from studio.interaction import ManualFrameScheduler


STUB_BASE_URL = "http://studio.test"


# =============================================================================
# SEED DATA
# =============================================================================

def seed() -> Dict[str, List[dict]]:
    return {
        "projects": [
            {"id": "p1", "title": "Night Ferry"},
            {"id": "p2", "title": "Dry Season"},
        ],
        "scripts": [
            {"id": "sc1", "projectId": "p1", "title": "Draft 1"},
        ],
        "scenes": [
            {"id": "s1", "projectId": "p1", "title": "Harbor"},
        ],
        "shots": [
            {"id": "sh1", "sceneId": "s1", "description": "Wide on the dock"},
            {"id": "sh2", "sceneId": "s1", "description": "Close on the rope"},
        ],
        "versions": [
            {"id": "v1", "shotId": "sh1", "description": "Wide on the dock"},
        ],
        "variants": [],
    }


# =============================================================================
# STUB APP
# =============================================================================

def create_stub_app() -> FastAPI:
    """Stub API; ``app.state.hits`` counts requests by 'METHOD path?query'."""
    app = FastAPI()
    db = seed()
    app.state.db = db
    app.state.hits = Counter()

    @app.middleware("http")
    async def count_hits(request: Request, call_next):
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        app.state.hits[f"{request.method} {target}"] += 1
        return await call_next(request)

    @app.get("/api/projects")
    async def list_projects():
        return db["projects"]

    @app.post("/api/projects", status_code=201)
    async def create_project(request: Request):
        payload = await request.json()
        project = {"id": f"p{len(db['projects']) + 1}", **payload}
        db["projects"].append(project)
        return project

    @app.get("/api/projects/{project_id}")
    async def get_project(project_id: str):
        for project in db["projects"]:
            if project["id"] == project_id:
                return project
        raise HTTPException(status_code=404, detail="Project not found")

    @app.get("/api/scripts")
    async def list_scripts(projectId: str):
        return [s for s in db["scripts"] if s["projectId"] == projectId]

    @app.post("/api/scripts/generate")
    async def generate_script(request: Request):
        payload = await request.json()
        project_id = payload["projectId"]
        script = {"id": f"sc{len(db['scripts']) + 1}", "projectId": project_id, "title": "Generated"}
        db["scripts"].append(script)
        db["scenes"].append({"id": f"s{len(db['scenes']) + 1}", "projectId": project_id, "title": "New"})
        return script

    @app.get("/api/scenes")
    async def list_scenes(projectId: str):
        return [s for s in db["scenes"] if s["projectId"] == projectId]

    @app.get("/api/shots")
    async def list_shots(sceneId: str):
        return [s for s in db["shots"] if s["sceneId"] == sceneId]

    @app.patch("/api/shots/{shot_id}")
    async def update_shot(shot_id: str, request: Request):
        payload = await request.json()
        for shot in db["shots"]:
            if shot["id"] == shot_id:
                db["versions"].append({
                    "id": f"v{len(db['versions']) + 1}",
                    "shotId": shot_id,
                    "description": shot["description"],
                })
                shot.update(payload)
                return shot
        raise HTTPException(status_code=404, detail="Shot not found")

    @app.get("/api/shots/{shot_id}/versions")
    async def list_versions(shot_id: str):
        return [v for v in db["versions"] if v["shotId"] == shot_id]

    @app.post("/api/characters/{character_id}/generate-images")
    async def generate_images(character_id: str):
        for i in (1, 2):
            db["variants"].append({
                "id": f"{character_id}-iv{i}",
                "characterId": character_id,
                "status": "pending",
            })
        return {"started": 2}

    @app.get("/api/characters/{character_id}/image-variants")
    async def list_image_variants(character_id: str):
        variants = [v for v in db["variants"] if v["characterId"] == character_id]
        # each poll moves the first unfinished variant one step along
        for variant in variants:
            if variant["status"] == "pending":
                variant["status"] = "generating"
                break
            if variant["status"] == "generating":
                variant["status"] = "completed"
                break
        return [dict(v) for v in variants]

    @app.get("/api/user")
    async def current_user():
        raise HTTPException(status_code=401, detail="Unauthorized")

    @app.get("/api/broken")
    async def broken():
        return Response(content="{oops", media_type="application/json")

    return app


def make_client(app: FastAPI) -> StudioClient:
    """StudioClient wired to ``app`` with a manually ticked frame scheduler."""
    http_client = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url=STUB_BASE_URL
    )
    return StudioClient(
        ClientConfig(transport=TransportConfig(base_url=STUB_BASE_URL)),
        http_client=http_client,
        frame_scheduler=ManualFrameScheduler()
    )
