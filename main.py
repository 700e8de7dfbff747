# main.py

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional, Union

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from dotenv import load_dotenv

from core.config import DEFAULT_PROPERTY, max_sessions, session_idle_ttl, setup_logging
from core.proximity import ProximityCalculator
from core.session import ComposerSession
from services import mailer, workbook

# Charge les variables d'environnement (.env)
load_dotenv()
setup_logging()

logger = logging.getLogger(__name__)

# one ComposerSession per open browser session, dropped on DELETE, idle expiry or shutdown
SESSIONS: Dict[str, ComposerSession] = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    for sid in list(SESSIONS):
        await SESSIONS.pop(sid).close()


app = FastAPI(lifespan=lifespan)

# command name -> argument kind: None (no argument), "int", "day", "day?" (optional day)
_COMMANDS = {
    "set_chair_set_count": "int",
    "increment_chair_sets": None,
    "decrement_chair_sets": None,
    "toggle_supply_box": None,
    "toggle_bonfire": "day?",
    "set_bonfire_day": "day",
    "toggle_photo_session": "day?",
    "set_photo_day": "day",
    "reset": None,
}


# Schéma pour une commande de sélection
class CommandRequest(BaseModel):
    command: str
    value: Optional[Union[int, str]] = None


# Schéma pour l'envoi d'e-mail (adresse non validée)
class SaveRequest(BaseModel):
    email: str


def _session(sid: str) -> ComposerSession:
    s = SESSIONS.get(sid)
    if s is None:
        raise HTTPException(status_code=404, detail=f"Unknown session {sid}")
    s.touch()
    return s


async def _reap_sessions(room: int = 0) -> None:
    """Close sessions idle past SESSION_IDLE_TTL, then the oldest ones above MAX_SESSIONS."""
    ttl = session_idle_ttl()
    for sid, s in list(SESSIONS.items()):
        if s.idle_for() > ttl:
            await SESSIONS.pop(sid).close()
            logger.info("session %s expired after %.0fs idle", sid, ttl)
    excess = len(SESSIONS) + room - max_sessions()
    if excess > 0:
        oldest = sorted(SESSIONS.values(), key=lambda s: s.last_seen)[:excess]
        for s in oldest:
            await SESSIONS.pop(s.id).close()
            logger.info("session %s evicted (session cap)", s.id)


def _snapshot(s: ComposerSession) -> dict:
    state = s.engine.state
    return {
        "session_id": s.id,
        "selection": {
            "chair_set_count": state.chair_set_count,
            "supply_box_included": state.supply_box_included,
            "bonfire_day": state.bonfire_day,
            "photo_day": state.photo_day,
        },
        "itinerary": s.engine.compute_itinerary().as_dict(),
    }


@app.post("/api/sessions", response_model=dict)
async def create_session():
    await _reap_sessions(room=1)
    s = ComposerSession()
    await s.start()
    SESSIONS[s.id] = s
    logger.info("session %s opened", s.id)
    return _snapshot(s)


@app.get("/api/sessions/{sid}/itinerary", response_model=dict)
async def get_itinerary(sid: str):
    await _reap_sessions()
    return _snapshot(_session(sid))


@app.post("/api/sessions/{sid}/commands", response_model=dict)
async def apply_command(sid: str, req: CommandRequest):
    await _reap_sessions()
    s = _session(sid)
    if req.command not in _COMMANDS:
        raise HTTPException(status_code=422, detail=f"Unknown command {req.command}")
    arg = _COMMANDS[req.command]
    method = getattr(s.engine, req.command)
    if arg in ("int", "day") and req.value is None:
        raise HTTPException(status_code=422, detail=f"{req.command} needs a value")
    try:
        if arg is None or req.value is None:
            method()
        elif arg == "int":
            method(int(req.value))
        else:
            method(str(req.value))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _snapshot(s)


@app.get("/api/sessions/{sid}/map", response_model=dict)
async def get_map(sid: str):
    await _reap_sessions()
    return _session(sid).map_view()


@app.get("/api/proximity", response_model=dict)
def get_proximity():
    calc = ProximityCalculator(DEFAULT_PROPERTY)
    prox = calc.proximity()
    req = calc.route_request()
    return {
        "distance_miles": prox.distance_miles,
        "formatted_label": prox.formatted_label,
        "route_request": {
            "origin": req.origin.as_pair(),
            "destination": req.destination.as_pair(),
            "profile": req.profile,
        },
    }


@app.post("/api/sessions/{sid}/save")
def save_itinerary(sid: str, req: SaveRequest):
    s = _session(sid)
    itin = s.engine.compute_itinerary()
    try:
        xlsx = workbook.generate_workbook(itin, s.engine.property, req.email)
        mailer.send_itinerary_email(req.email, itin, s.engine.property, attachment_path=xlsx)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"message": "Itinerary sent", "total": itin.total}


@app.delete("/api/sessions/{sid}")
async def close_session(sid: str):
    s = _session(sid)
    await SESSIONS.pop(sid).close()
    logger.info("session %s closed", s.id)
    return {"message": "Session closed"}
