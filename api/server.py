"""FastAPI server for the FitCheck studio.

Hosts one interactive try-on session:
- finalize a model photo, then stack garments on it
- undo, switch poses, start over
- save, load, and delete whole outfits
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from fitcheck.config import StudioConfig, load_config
from fitcheck.logging_config import configure_logging
from fitcheck.models import Garment, SavedOutfit, SessionView
from fitcheck.poses import POSE_INSTRUCTIONS
from fitcheck.services import ComfyUIClient
from fitcheck.session import SessionController
from fitcheck.storage import JsonFileStorage, SavedOutfitStore
from fitcheck.utils import check_image_reference


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _generator is not None:
        await _generator.close()


app = FastAPI(
    title="FitCheck API",
    description="Layered virtual try-on with pose variations and saved outfits",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ModelRequest(BaseModel):
    """Request body for finalizing the model photo."""
    image: str = Field(min_length=1)  # data URL or image reference


class PoseRequest(BaseModel):
    """Request body for switching pose."""
    pose_index: int = Field(ge=0, lt=len(POSE_INSTRUCTIONS))


# Initialize session (will be done on first request)
_config: StudioConfig | None = None
_session: SessionController | None = None
_generator: ComfyUIClient | None = None


def get_config() -> StudioConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def ensure_allowed_image(reference: str) -> None:
    """422 for image references outside data URLs and the allowed hosts."""
    try:
        check_image_reference(reference, get_config().allowed_image_hosts)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def get_session() -> SessionController:
    """Get or create the session instance."""
    global _session, _generator
    if _session is None:
        config = get_config()
        configure_logging(config.log_level)
        _generator = ComfyUIClient(config.comfyui, config.generation)
        store = SavedOutfitStore(JsonFileStorage(config.storage_dir), key=config.saved_outfits_key)
        _session = SessionController(_generator, store)
    return _session


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "FitCheck API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Detailed health check."""
    session = get_session()
    check = getattr(session.generator, "check_connection", None)
    comfyui_ok = await check() if check else False

    return {
        "status": "ok" if comfyui_ok else "degraded",
        "comfyui": "connected" if comfyui_ok else "disconnected",
    }


@app.get("/api/poses")
async def list_poses() -> list[str]:
    return list(POSE_INSTRUCTIONS)


@app.get("/api/session", response_model=SessionView)
async def get_session_view():
    return get_session().view()


@app.get("/api/wardrobe", response_model=list[Garment])
async def get_wardrobe():
    return get_session().wardrobe.items


@app.post("/api/session/model", response_model=SessionView)
async def finalize_model(request: ModelRequest):
    ensure_allowed_image(request.image)
    session = get_session()
    session.finalize_model(request.image)
    return session.view()


@app.post("/api/session/reset", response_model=SessionView)
async def start_over():
    session = get_session()
    session.start_over()
    return session.view()


@app.post("/api/session/garments", response_model=SessionView)
async def apply_garment(garment: Garment):
    """Apply a garment on top of the current outfit.

    Generation failures are reported in the returned view's ``error``.
    """
    ensure_allowed_image(garment.url)
    session = get_session()
    if session.history is None:
        raise HTTPException(status_code=409, detail="No model image has been finalized")
    await session.apply_garment(garment)
    return session.view()


@app.post("/api/session/undo", response_model=SessionView)
async def remove_last_garment():
    session = get_session()
    session.remove_last_garment()
    return session.view()


@app.post("/api/session/pose", response_model=SessionView)
async def select_pose(request: PoseRequest):
    session = get_session()
    await session.select_pose(request.pose_index)
    return session.view()


@app.get("/api/outfits", response_model=list[SavedOutfit])
async def list_outfits():
    return get_session().saved_outfits.outfits


@app.post("/api/outfits", response_model=SavedOutfit)
async def save_outfit():
    session = get_session()
    outfit = session.save_outfit()
    if outfit is None:
        raise HTTPException(status_code=409, detail="Nothing to save yet")
    return outfit


@app.post("/api/outfits/{outfit_id}/load", response_model=SessionView)
async def load_outfit(outfit_id: str):
    session = get_session()
    session.load_outfit(outfit_id)
    return session.view()


@app.delete("/api/outfits/{outfit_id}", response_model=list[SavedOutfit])
async def delete_outfit(outfit_id: str):
    session = get_session()
    session.delete_outfit(outfit_id)
    return session.saved_outfits.outfits


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
