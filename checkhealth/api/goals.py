from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from checkhealth.core.errors import GoalNotFoundError
from checkhealth.features.goals import mapper
from checkhealth.features.goals.service import GoalService, get_goal_service
from checkhealth.models.goal import GoalCategory, GoalStatus

router = APIRouter(prefix="/goals")


class FrequencyRequest(BaseModel):
    periodicity: Optional[str] = None
    times_per_period: Optional[int] = None


class RewardRequest(BaseModel):
    points: Optional[int] = None
    badge: Optional[str] = None


class ProgressSeed(BaseModel):
    completed: int = 0
    total: Optional[int] = None
    unit: Optional[str] = None


class GoalRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None  # PHYSICAL_HEALTH | MENTAL_HEALTH | NUTRITION | SLEEP | WELLBEING
    type: Optional[str] = None  # daily | weekly | monthly | single
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    frequency: Optional[FrequencyRequest] = None
    difficulty: Optional[str] = None  # easy | medium | hard
    reward: Optional[RewardRequest] = None
    status: Optional[str] = None  # active | completed | archived | cancelled
    notifications: Optional[bool] = None
    progress: Optional[ProgressSeed] = None


class ProgressRequest(BaseModel):
    increment: int


@router.post("", status_code=201)
def create_goal(req: GoalRequest, service: GoalService = Depends(get_goal_service)):
    """Create a goal. Status is always forced to active."""
    goal = service.create_goal(mapper.to_entity(req))
    return mapper.to_response(goal)


@router.get("")
def list_goals(
    user_id: Optional[str] = Query(None, min_length=1),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    service: GoalService = Depends(get_goal_service),
) -> List[dict]:
    goals = service.list_goals(
        user_id=user_id,
        status=GoalStatus.from_wire(status, "status"),
        category=GoalCategory.from_wire(category, "category"),
    )
    return [mapper.to_response(g) for g in goals]


@router.get("/{goal_id}")
def get_goal(goal_id: int, service: GoalService = Depends(get_goal_service)):
    goal = service.find_by_id(goal_id)
    if goal is None:
        raise GoalNotFoundError(goal_id)
    return mapper.to_response(goal)


@router.put("/{goal_id}")
def update_goal(goal_id: int, req: GoalRequest, service: GoalService = Depends(get_goal_service)):
    goal = service.update_goal(goal_id, mapper.to_entity(req))
    return mapper.to_response(goal)


@router.delete("/{goal_id}", status_code=204)
def delete_goal(goal_id: int, service: GoalService = Depends(get_goal_service)):
    service.delete_goal(goal_id)
    return Response(status_code=204)


@router.patch("/{goal_id}/progress")
def update_progress(goal_id: int, req: ProgressRequest, service: GoalService = Depends(get_goal_service)):
    goal = service.update_progress(goal_id, req.increment)
    return mapper.to_response(goal)
