# Endpoints for the boss catalog and for running boss encounters

# brainquest/endpoints/bosses.py
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import List, Optional

from brainquest.models.enums import Subject
from brainquest.services import session_registry
from brainquest.services.achievement_service import check_achievements
from brainquest.services.boss_battle import BossBattle
from brainquest.services.boss_catalog import BossConfig, get_all_bosses, get_boss_by_id, get_bosses_for_subject
from brainquest.state_manager import UserCollaborators
from brainquest.utils.exceptions import ContentUnavailableError, InvalidTransitionError
from brainquest.utils.logger import logger

router = APIRouter()
battles_router = APIRouter()

class BattleCreate(BaseModel):
    user_id: str

class AnswerRequest(BaseModel):
    option_id: str


def get_live_battle(encounter_id: str) -> BossBattle:
    battle = session_registry.lookup(session_registry.battles, encounter_id)
    if battle is None:
        raise HTTPException(status_code=404, detail="Battle not found")
    return battle


@router.get("/", response_model=List[BossConfig])
async def list_bosses(subject: Optional[Subject] = None):
    if subject is not None:
        return get_bosses_for_subject(subject)
    return get_all_bosses()

@router.get("/{boss_id}", response_model=BossConfig)
async def get_boss(boss_id: str):
    try:
        return get_boss_by_id(boss_id)
    except ContentUnavailableError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.post("/{boss_id}/battles", response_model=dict)
async def create_battle(boss_id: str, request: BattleCreate):
    """
    Sets up an encounter in its intro phase. An unknown boss, or a boss whose
    topics cannot produce questions, is reported as not available.
    """
    collaborators = UserCollaborators(request.user_id)
    try:
        boss = get_boss_by_id(boss_id)
        await collaborators.ensure_user()
        battle = BossBattle(
            boss,
            user_id=request.user_id,
            store=collaborators,
            profile=collaborators,
            activity=collaborators.activity,
        )
    except ContentUnavailableError as e:
        raise HTTPException(status_code=404, detail=str(e))

    session_registry.register(session_registry.battles, battle.encounter_id, battle)
    logger.info(f"User '{request.user_id}' challenged {boss.id} (encounter {battle.encounter_id}).")
    return battle.snapshot()


@battles_router.get("/{encounter_id}", response_model=dict)
async def get_battle(encounter_id: str):
    return get_live_battle(encounter_id).snapshot()

@battles_router.post("/{encounter_id}/start", response_model=dict)
async def start_battle(encounter_id: str):
    battle = get_live_battle(encounter_id)
    try:
        battle.start()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return battle.snapshot()

@battles_router.post("/{encounter_id}/answer", response_model=dict)
async def answer_battle(encounter_id: str, request: AnswerRequest):
    battle = get_live_battle(encounter_id)
    try:
        await battle.answer(request.option_id)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await battle.drain()
    data = battle.snapshot()
    data["achievements_unlocked"] = await check_achievements(battle.user_id)
    return data

@battles_router.post("/{encounter_id}/reset", response_model=dict)
async def reset_battle(encounter_id: str):
    """Back to the intro with a fresh question set; the encounter gets a new id."""
    battle = get_live_battle(encounter_id)
    try:
        battle.reset()
    except ContentUnavailableError as e:
        session_registry.discard(session_registry.battles, encounter_id)
        raise HTTPException(status_code=404, detail=str(e))
    session_registry.rekey(session_registry.battles, encounter_id, battle, battle.encounter_id)
    return battle.snapshot()

@battles_router.delete("/{encounter_id}", response_model=dict)
async def abandon_battle(encounter_id: str):
    battle = get_live_battle(encounter_id)
    battle.abandon()
    session_registry.discard(session_registry.battles, encounter_id)
    return {"message": "Battle closed", "encounter_id": encounter_id}
