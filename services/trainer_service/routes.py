from fastapi import APIRouter, Depends, HTTPException, Query, Request
from dateutil import parser

from shared.rbac import require_role
from shared.security import AuthUser, get_current_user

from .commands import (
    CancelTraining,
    DeleteHour,
    MakeHoursAvailable,
    MakeHoursUnavailable,
    MoveTraining,
    ScheduleTraining,
)
from .queries import AvailableHours, HourAvailability
from .schemas import (
    Date,
    HourAvailabilityResponse,
    HourRequest,
    HourUpdate,
    MoveTrainingRequest,
)

router = APIRouter()


def get_application(request: Request):
    return request.app.state.application


def parse_time(value: str, name: str):
    try:
        return parser.isoparse(value)
    except (ValueError, OverflowError):
        raise HTTPException(status_code=400, detail=f"Invalid datetime format for {name}")


@router.get("/trainer/calendar", response_model=list[Date])
async def get_trainer_available_hours(
    date_from: str = Query(...),
    date_to: str = Query(...),
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    query = AvailableHours(
        date_from=parse_time(date_from, "date_from"),
        date_to=parse_time(date_to, "date_to"),
    )
    return await app.queries.available_hours.handle(query)


@router.put("/trainer/calendar/make-hours-available", status_code=204)
async def make_hours_available(
    data: HourUpdate,
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    require_role(user, ["trainer"])
    await app.commands.make_hours_available.handle(MakeHoursAvailable(hours=list(data.hours)))


@router.put("/trainer/calendar/make-hours-unavailable", status_code=204)
async def make_hours_unavailable(
    data: HourUpdate,
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    require_role(user, ["trainer"])
    await app.commands.make_hours_unavailable.handle(MakeHoursUnavailable(hours=list(data.hours)))


@router.delete("/trainer/calendar/hours", status_code=204)
async def delete_hour(
    hour: str = Query(...),
    user: AuthUser = Depends(get_current_user),
    app=Depends(get_application),
):
    require_role(user, ["trainer"])
    await app.commands.delete_hour.handle(DeleteHour(hour=parse_time(hour, "hour")))


# Service-to-service endpoints, called by the trainings service.

@router.get("/internal/hours/availability", response_model=HourAvailabilityResponse)
async def is_hour_available(hour: str = Query(...), app=Depends(get_application)):
    t = parse_time(hour, "hour")
    available = await app.queries.hour_availability.handle(HourAvailability(hour=t))
    return HourAvailabilityResponse(hour=t, is_available=available)


@router.post("/internal/hours/schedule-training", status_code=204)
async def schedule_training(data: HourRequest, app=Depends(get_application)):
    await app.commands.schedule_training.handle(ScheduleTraining(hour=data.hour))


@router.post("/internal/hours/cancel-training", status_code=204)
async def cancel_training(data: HourRequest, app=Depends(get_application)):
    await app.commands.cancel_training.handle(CancelTraining(hour=data.hour))


@router.post("/internal/hours/move-training", status_code=204)
async def move_training(data: MoveTrainingRequest, app=Depends(get_application)):
    await app.commands.move_training.handle(
        MoveTraining(new_time=data.new_time, original_time=data.original_time)
    )
