"""
FastAPI backend for the campaign tracker.
Thin HTTP surface over the commit pipeline: every mutating endpoint runs one pipeline
step and returns {"ok", "message", "events", "campaign"}.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from .database import get_db_file_path, init_db
from .store import SqlCampaignStore

from kdm_tracker.config import CAMPAIGN_VERSION
from kdm_tracker.engine.actions import (
    begin_hunt,
    begin_showdown,
    draw_ai_card,
    end_showdown,
    mark_survivor_action,
    move_hunt,
    next_turn,
    resolve_hunt,
    set_hunt_event,
    start_showdown_from_hunt,
    update_hunt_monster,
    update_hunt_survivor,
    update_showdown_monster,
    update_showdown_survivor,
)
from kdm_tracker.engine.definitions import list_monsters, load_monster_definitions
from kdm_tracker.engine.errors import EntityNotFoundError
from kdm_tracker.engine.pipeline import CommitPipeline, CommitResult
from kdm_tracker.engine.queries import (
    get_active_hunt,
    get_active_showdown,
    get_available_action_types,
    get_available_quarries,
    get_available_scouts,
    get_available_survivors,
    get_hunt_board,
    get_selected_hunt,
    get_selected_settlement,
    get_selected_showdown,
    get_selected_survivor,
    get_settlement_survivors,
    get_showdown_summary,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="KDM Tracker API",
    description="Local API for tracking settlements, survivors, hunts and showdowns",
    version=CAMPAIGN_VERSION,
    lifespan=lifespan,
)

# CORS configuration for frontend
CORS_ORIGINS = ["http://localhost:5173", "http://localhost:5174", "http://localhost:3000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path of failed requests so they can be traced to the endpoint."""
    method = getattr(request, "method", "?")
    url = getattr(request, "url", None)
    path = url.path if url else "?"
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            print(f"[500] {method} {path}", flush=True)
        elif response.status_code >= 400:
            print(f"[{response.status_code}] {method} {path}", flush=True)
        return response
    except Exception:
        print(f"[500] {method} {path} (exception)", flush=True)
        raise


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    """Return 500 with CORS headers and full traceback so the frontend can read the error."""
    import traceback
    tb = traceback.format_exc()
    traceback.print_exc()
    origin = request.headers.get("origin")
    allow_origin = origin if origin in CORS_ORIGINS else CORS_ORIGINS[0]
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "traceback": tb},
        headers={
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Credentials": "true",
        },
    )

# Monster reference data is read once; it never changes at runtime
monster_defs = load_monster_definitions()

_pipeline: CommitPipeline | None = None


def get_pipeline() -> CommitPipeline:
    """Dependency returning the process-wide pipeline over the database store."""
    global _pipeline
    if _pipeline is None:
        _pipeline = CommitPipeline(SqlCampaignStore(version=CAMPAIGN_VERSION), monster_defs)
    return _pipeline


# ===== Pydantic Models =====

class SaveRequest(BaseModel):
    patch: dict[str, Any]  # persisted (camelCase) keys -> replacement values
    success_message: str | None = None


class BeginHuntRequest(BaseModel):
    settlement_id: int
    quarry_name: str
    quarry_level: str
    survivor_ids: list[int]
    scout_id: int | None = None


class PositionsRequest(BaseModel):
    survivor_position: int
    quarry_position: int


class HuntEventRequest(BaseModel):
    position: int
    event: str | None = None  # "basic" | "monster" | None to clear
    cycle: bool = False


class ResolveHuntRequest(BaseModel):
    outcome: str


class ShowdownFromHuntRequest(BaseModel):
    ambush: str | None = None


class ChangesRequest(BaseModel):
    changes: dict[str, Any]  # snake_case field -> new value


class BeginShowdownRequest(BaseModel):
    settlement_id: int
    monster_name: str
    monster_level: str
    survivor_ids: list[int]
    scout_id: int | None = None
    monster_type: str | None = None
    ambush: str = "none"


class AICardRequest(BaseModel):
    monster_index: int = 0


class SurvivorActionRequest(BaseModel):
    survivor_id: int
    activation_used: bool | None = None
    movement_used: bool | None = None


class NextTurnRequest(BaseModel):
    force: bool = False


class EndShowdownRequest(BaseModel):
    outcome: str = "victory"


# ===== Helper Functions =====

def result_response(result: CommitResult) -> dict[str, Any]:
    """Pipeline result as a response body; failures become 404 (missing entity) or 400."""
    if not result.ok:
        status = 404 if isinstance(result.error, EntityNotFoundError) else 400
        raise HTTPException(status_code=status, detail=result.message)
    return {
        "ok": result.ok,
        "message": result.message,
        "events": [e.to_dict() for e in result.events],
        "campaign": result.campaign.to_dict(),
    }


def _monster_summary(definition) -> dict[str, Any]:
    return {
        "name": definition.name,
        "type": definition.monster_type,
        "node": definition.node,
        "multiMonster": definition.multi_monster,
        "levels": definition.available_levels(),
        "huntBoard": {str(pos): label for pos, label in sorted(definition.hunt_board.items())},
    }


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "KDM Tracker API", "version": CAMPAIGN_VERSION}


@app.get("/debug")
def debug_info():
    """Where the campaign is stored."""
    return {"db_file": get_db_file_path()}


# ----- Campaign -----

@app.get("/campaign")
def get_campaign(pipeline: CommitPipeline = Depends(get_pipeline)):
    return pipeline.read().to_dict()


@app.post("/campaign/save")
def save_campaign(request: SaveRequest, pipeline: CommitPipeline = Depends(get_pipeline)):
    """Shallow-merge `patch` over the campaign (each key replaces that field entirely)."""
    return result_response(pipeline.save(request.patch, request.success_message))


@app.get("/campaign/export")
def export_campaign(pipeline: CommitPipeline = Depends(get_pipeline)):
    """Pretty-printed campaign JSON as a download."""
    return Response(
        content=pipeline.export_campaign(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="campaign.json"'},
    )


@app.post("/campaign/import")
def import_campaign(
    data: dict[str, Any] = Body(...),
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    """Replace the campaign with an exported document. Invalid documents change nothing."""
    return result_response(pipeline.import_campaign(data))


@app.get("/available-actions")
def available_actions(
    hunt_id: int | None = None,
    showdown_id: int | None = None,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    campaign = pipeline.read()
    return {"actions": get_available_action_types(campaign, hunt_id=hunt_id, showdown_id=showdown_id)}


@app.get("/selection")
def selection(pipeline: CommitPipeline = Depends(get_pipeline)):
    """The selected settlement, survivor, hunt and showdown (None when nothing is selected)."""
    campaign = pipeline.read()
    return {
        name: entity.to_dict() if entity else None
        for name, entity in (
            ("settlement", get_selected_settlement(campaign)),
            ("survivor", get_selected_survivor(campaign)),
            ("hunt", get_selected_hunt(campaign)),
            ("showdown", get_selected_showdown(campaign)),
        )
    }


@app.get("/settlements/{settlement_id}/departure")
def departure_options(
    settlement_id: int,
    activity: str = "hunt",
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    """Who may depart on a hunt or showdown, the unlocked quarries, and any activity in progress."""
    campaign = pipeline.read()
    settlement = campaign.get_settlement(settlement_id)
    if settlement is None:
        raise HTTPException(status_code=404, detail=f"Settlement {settlement_id} not found")
    survivors = get_available_survivors(campaign, settlement_id, activity)
    active_hunt = get_active_hunt(campaign, settlement_id)
    active_showdown = get_active_showdown(campaign, settlement_id)
    return {
        "survivors": [{"id": s.id, "name": s.name} for s in survivors],
        "scouts": [
            {"id": s.id, "name": s.name}
            for s in get_available_scouts(campaign, settlement_id, [], activity)
        ],
        "quarries": [q.name for q in get_available_quarries(settlement)],
        "members": len(get_settlement_survivors(campaign, settlement_id)),
        "active_hunt_id": active_hunt.id if active_hunt else None,
        "active_showdown_id": active_showdown.id if active_showdown else None,
    }


# ----- Reference data -----

@app.get("/monsters")
def get_monsters(monster_type: str | None = None):
    """Quarries and nemeses available for hunts and showdowns."""
    return {"monsters": [_monster_summary(d) for d in list_monsters(monster_defs, monster_type)]}


# ----- Hunts -----

@app.post("/hunts")
def create_hunt(request: BeginHuntRequest, pipeline: CommitPipeline = Depends(get_pipeline)):
    action = begin_hunt(
        request.settlement_id,
        request.quarry_name,
        request.quarry_level,
        request.survivor_ids,
        request.scout_id,
    )
    return result_response(pipeline.dispatch(action))


@app.get("/hunts/{hunt_id}/board")
def hunt_board(hunt_id: int, pipeline: CommitPipeline = Depends(get_pipeline)):
    board = get_hunt_board(pipeline.read(), hunt_id)
    if board is None:
        raise HTTPException(status_code=404, detail=f"Hunt {hunt_id} not found")
    return board


@app.post("/hunts/{hunt_id}/positions")
def move_hunt_tokens(
    hunt_id: int,
    request: PositionsRequest,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    """Drop the survivor and quarry tokens on absolute board spaces."""
    action = move_hunt(hunt_id, request.survivor_position, request.quarry_position)
    return result_response(pipeline.dispatch(action))


@app.post("/hunts/{hunt_id}/board-event")
def hunt_board_event(
    hunt_id: int,
    request: HuntEventRequest,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    action = set_hunt_event(hunt_id, request.position, request.event, request.cycle)
    return result_response(pipeline.dispatch(action))


@app.post("/hunts/{hunt_id}/survivors/{survivor_id}")
def hunt_survivor_details(
    hunt_id: int,
    survivor_id: int,
    request: ChangesRequest,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    return result_response(pipeline.dispatch(update_hunt_survivor(hunt_id, survivor_id, request.changes)))


@app.post("/hunts/{hunt_id}/monsters/{monster_index}")
def hunt_monster(
    hunt_id: int,
    monster_index: int,
    request: ChangesRequest,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    return result_response(pipeline.dispatch(update_hunt_monster(hunt_id, monster_index, request.changes)))


@app.post("/hunts/{hunt_id}/resolve")
def resolve_hunt_endpoint(
    hunt_id: int,
    request: ResolveHuntRequest,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    return result_response(pipeline.dispatch(resolve_hunt(hunt_id, request.outcome)))


@app.post("/hunts/{hunt_id}/showdown")
def showdown_from_hunt(
    hunt_id: int,
    request: ShowdownFromHuntRequest | None = None,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    """Start the showdown that follows a hunt which met its quarry."""
    ambush = request.ambush if request else None
    return result_response(pipeline.dispatch(start_showdown_from_hunt(hunt_id, ambush)))


# ----- Showdowns -----

@app.post("/showdowns")
def create_showdown(request: BeginShowdownRequest, pipeline: CommitPipeline = Depends(get_pipeline)):
    action = begin_showdown(
        request.settlement_id,
        request.monster_name,
        request.monster_level,
        request.survivor_ids,
        scout_id=request.scout_id,
        monster_type=request.monster_type,
        ambush=request.ambush,
    )
    return result_response(pipeline.dispatch(action))


@app.get("/showdowns/{showdown_id}/summary")
def showdown_summary(showdown_id: int, pipeline: CommitPipeline = Depends(get_pipeline)):
    summary = get_showdown_summary(pipeline.read(), showdown_id)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"Showdown {showdown_id} not found")
    return summary


@app.post("/showdowns/{showdown_id}/ai-card")
def showdown_ai_card(
    showdown_id: int,
    request: AICardRequest | None = None,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    monster_index = request.monster_index if request else 0
    return result_response(pipeline.dispatch(draw_ai_card(showdown_id, monster_index)))


@app.post("/showdowns/{showdown_id}/survivor-action")
def showdown_survivor_action(
    showdown_id: int,
    request: SurvivorActionRequest,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    action = mark_survivor_action(
        showdown_id, request.survivor_id, request.activation_used, request.movement_used,
    )
    return result_response(pipeline.dispatch(action))


@app.post("/showdowns/{showdown_id}/next-turn")
def showdown_next_turn(
    showdown_id: int,
    request: NextTurnRequest | None = None,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    force = request.force if request else False
    return result_response(pipeline.dispatch(next_turn(showdown_id, force)))


@app.post("/showdowns/{showdown_id}/survivors/{survivor_id}")
def showdown_survivor_details(
    showdown_id: int,
    survivor_id: int,
    request: ChangesRequest,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    action = update_showdown_survivor(showdown_id, survivor_id, request.changes)
    return result_response(pipeline.dispatch(action))


@app.post("/showdowns/{showdown_id}/monsters/{monster_index}")
def showdown_monster(
    showdown_id: int,
    monster_index: int,
    request: ChangesRequest,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    action = update_showdown_monster(showdown_id, monster_index, request.changes)
    return result_response(pipeline.dispatch(action))


@app.post("/showdowns/{showdown_id}/end")
def showdown_end(
    showdown_id: int,
    request: EndShowdownRequest | None = None,
    pipeline: CommitPipeline = Depends(get_pipeline),
):
    outcome = request.outcome if request else "victory"
    return result_response(pipeline.dispatch(end_showdown(showdown_id, outcome)))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
