import asyncio
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..content import get_curated_map
from ..dependencies import GameServices, get_services
from ..logger import get_logger
from ..models.commands import SessionCommand
from ..models.game import (
    GameMode,
    ScoreRequest,
    ScoreResponse,
    SessionCreate,
    SessionResponse,
    SessionState,
)
from ..services.scoring import calculate_shame_score, mockery_tier, random_roast
from ..services.session import (
    ChallengeSession,
    CuratedMapSession,
    GameSessionController,
    SinglePlayerSession,
)

router = APIRouter(tags=["Game"])
logger = get_logger("api")

_command_adapter = TypeAdapter(SessionCommand)


async def build_session(data: SessionCreate, services: GameServices) -> GameSessionController:
    """Create the controller for the requested mode."""
    if data.player_id is not None and await services.players.get_player(data.player_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Player not found."
        )

    options = dict(
        locations=services.locations,
        geo=services.geo,
        achievements=services.achievements,
        players=services.players,
        player_id=data.player_id,
        duration_ms=data.timer_duration_ms,
        clock=services.clock_factory(),
    )

    if data.mode == GameMode.CURATED:
        curated_map = get_curated_map(data.map_id) if data.map_id else None
        if curated_map is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Curated map not found."
            )
        return CuratedMapSession(curated_map, **options)
    if data.mode == GameMode.CHALLENGE:
        return ChallengeSession(**options)
    return SinglePlayerSession(**options)


@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    data: SessionCreate,
    services: GameServices = Depends(get_services)
):
    """Start a new single-player, challenge or curated-map game."""
    services.prune()
    session = await build_session(data, services)
    session_id = str(uuid4())
    services.sessions[session_id] = session
    await session.start_new_game()
    logger.info("Created %s session %s", data.mode.value, session_id)
    return SessionResponse(id=session_id, state=session.snapshot())


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    services: GameServices = Depends(get_services)
):
    """Get the current state of a session."""
    session = services.get_session(session_id)
    return SessionResponse(id=session_id, state=session.snapshot())


@router.post("/sessions/{session_id}/commands", response_model=SessionState)
async def send_command(
    session_id: str,
    command: SessionCommand,
    services: GameServices = Depends(get_services)
):
    """Apply a command (guess, next round, exit flow, restart) to a session."""
    session = services.get_session(session_id)
    return await session.handle(command)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    services: GameServices = Depends(get_services)
):
    """Stop and forget a session."""
    session = services.get_session(session_id)
    session.close()
    del services.sessions[session_id]
    return None


@router.websocket("/sessions/{session_id}/ws")
async def session_updates(
    websocket: WebSocket,
    session_id: str,
    services: GameServices = Depends(get_services)
):
    """
    Stream state snapshots of a session.

    The socket also accepts commands as JSON objects, the same shape the
    commands endpoint takes.
    """
    session = services.sessions.get(session_id)
    if session is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = session.subscribe(queue.put_nowait)
    queue.put_nowait(session.snapshot())

    async def push_updates():
        while True:
            item = await queue.get()
            if isinstance(item, BaseModel):
                item = item.model_dump(mode="json")
            await websocket.send_json(item)

    sender = asyncio.create_task(push_updates())
    try:
        while True:
            data = await websocket.receive_json()
            try:
                command = _command_adapter.validate_python(data)
            except ValidationError as e:
                queue.put_nowait({"detail": e.errors(include_url=False, include_context=False)})
                continue
            await session.handle(command)
    except WebSocketDisconnect:
        logger.debug("Websocket for session %s closed", session_id)
    finally:
        unsubscribe()
        sender.cancel()


@router.post("/score", response_model=ScoreResponse)
async def preview_score(request: ScoreRequest):
    """Shame score, tier and a roast for a distance."""
    distance = request.distance_meters
    return ScoreResponse(
        distance_meters=distance,
        score=calculate_shame_score(distance),
        tier=mockery_tier(distance).value,
        roast=random_roast(distance),
    )
