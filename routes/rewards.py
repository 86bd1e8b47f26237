from fastapi import APIRouter, Depends, HTTPException, status

from db.database import get_db
from routes.state import read_state, write_state
from utils.ledger import apply_to_user_data, level_info, level_progress, next_level_info, pomodoro_reward, redeem

router = APIRouter()


@router.get("")
async def list_rewards(conn = Depends(get_db)):
    state = read_state(conn)
    return {
        "coins": state.user_data.coins,
        "rewards": [r.to_wire() for r in state.settings.rewards],
    }


@router.get("/level")
async def current_level(conn = Depends(get_db)):
    """Island level for the learner's EXP and progress towards the next one."""
    state = read_state(conn)
    exp = state.user_data.exp
    levels = state.settings.island_levels
    current = level_info(exp, levels)
    upcoming = next_level_info(current, levels)
    return {
        "exp": exp,
        "coins": state.user_data.coins,
        "level": current.to_wire(),
        "nextLevel": upcoming.to_wire() if upcoming else None,
        "progress": round(level_progress(exp, levels), 1),
    }


@router.post("/pomodoro")
async def complete_pomodoro(conn = Depends(get_db)):
    state = read_state(conn)
    change = pomodoro_reward(state.settings)
    user_data = apply_to_user_data(state.user_data, change)
    write_state(conn, state.model_copy(update={"user_data": user_data}))
    return {"expDelta": change.exp_delta, "coinDelta": change.coin_delta, "userData": user_data.to_wire()}


@router.post("/{reward_id}/redeem")
async def redeem_reward(reward_id: str, conn = Depends(get_db)):
    state = read_state(conn)
    reward = next((r for r in state.settings.rewards if r.id == reward_id), None)
    if reward is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reward not found")
    result = redeem(state.user_data, reward)
    if not result.accepted:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.reason)
    write_state(conn, state.model_copy(update={"user_data": result.user_data}))
    return {"reward": reward.to_wire(), "coinDelta": result.coin_delta, "userData": result.user_data.to_wire()}
