import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from bookflow.api.v1.schemas import (
    BookingDraftSchema,
    BookingSchema,
    BookingSessionSchema,
    BookingStepSchema,
    BookingUpdateSchema,
    CommonRequestSchema,
    CustomerInfoUpdateSchema,
    PaymentUpdateSchema,
    RetreatRequestSchema,
    SelectDateTimeSchema,
    SelectServiceSchema,
    SelectStaffSchema,
    ServiceSchema,
    SpecialRequestsSchema,
    StartSessionRequestSchema,
    SubmitResponseSchema,
    TimeSlotSchema,
    ToggleAddOnSchema,
)
from bookflow.application.exceptions import (
    BookingFlowError,
    NetworkError,
    NotFoundError,
    SubmissionInProgressError,
    ValidationError,
)
from bookflow.application.ports.auth import AuthPort
from bookflow.application.use_cases.booking_flow import COMMON_REQUESTS, BookingFlow
from bookflow.application.use_cases.booking_session import BookingSessionUseCase
from bookflow.domain.entities.booking_draft import ANY_AVAILABLE_STAFF, StaffMember
from bookflow.domain.entities.booking_update import (
    AddOnToggled,
    BookingUpdate,
    CommonRequestAdded,
    CustomerInfoChanged,
    DateTimeSelected,
    PaymentChanged,
    ServiceSelected,
    SpecialRequestsChanged,
    StaffSelected,
)
from bookflow.wiring.dependencies import get_auth, get_booking_session_use_case

router = APIRouter()


def _http_error(e: BookingFlowError) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(
            status_code=400,
            detail={"message": e.message, "step": e.step, "field": e.field},
        )
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, SubmissionInProgressError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, NetworkError):
        return HTTPException(status_code=502, detail={"message": e.message, "code": e.code})
    return HTTPException(status_code=500, detail=str(e))


def _session_response(session_id: str, flow: BookingFlow) -> BookingSessionSchema:
    return BookingSessionSchema(
        session_id=session_id,
        current_step=flow.current_step.id,
        progress=flow.progress,
        can_advance=flow.can_advance(),
        is_submitting=flow.is_submitting,
        steps=[BookingStepSchema.model_validate(step) for step in flow.steps],
        draft=BookingDraftSchema.model_validate(flow.draft),
    )


async def _to_update(req: BookingUpdateSchema, flow: BookingFlow, uc: BookingSessionUseCase) -> BookingUpdate:
    draft = flow.draft
    if isinstance(req, SelectServiceSchema):
        return ServiceSelected(service=await uc.find_service(req.service_id))

    if isinstance(req, SelectDateTimeSchema):
        if req.time_slot_id is None:
            return DateTimeSelected(date=req.date)
        if draft.service is None:
            raise ValidationError("Please select a service", step="service", field="service")
        slots = await uc.time_slots(draft.service.id)
        slot = next((s for s in slots if s.id == req.time_slot_id), None)
        if slot is None:
            raise NotFoundError(f"Time slot '{req.time_slot_id}' not found")
        return DateTimeSelected(date=req.date, time_slot=slot)

    if isinstance(req, SelectStaffSchema):
        if req.staff is None:
            return StaffSelected(staff_member=ANY_AVAILABLE_STAFF)
        return StaffSelected(
            staff_member=StaffMember(
                id=req.staff.id,
                name=req.staff.name,
                specialties=tuple(req.staff.specialties),
                rating=req.staff.rating,
                reviews_count=req.staff.reviews_count,
            )
        )

    if isinstance(req, ToggleAddOnSchema):
        available = draft.service.add_ons if draft.service else ()
        add_on = next((a for a in available if a.id == req.add_on_id), None)
        if add_on is None:
            raise NotFoundError(f"Add-on '{req.add_on_id}' not found")
        return AddOnToggled(add_on=add_on)

    if isinstance(req, SpecialRequestsSchema):
        return SpecialRequestsChanged(text=req.text)

    if isinstance(req, CommonRequestSchema):
        text = COMMON_REQUESTS.get(req.request_id)
        if text is None:
            raise NotFoundError(f"Common request '{req.request_id}' not found")
        return CommonRequestAdded(text=text)

    if isinstance(req, CustomerInfoUpdateSchema):
        return CustomerInfoChanged(**req.model_dump(exclude={"type"}))

    if isinstance(req, PaymentUpdateSchema):
        return PaymentChanged(payment_method=req.payment_method, promo_code=req.promo_code)

    raise ValueError(f"Unsupported update type: {req.type}")


@router.get("/services", response_model=list[ServiceSchema])
async def list_services(
    page: int = 1,
    per_page: int = 20,
    uc: BookingSessionUseCase = Depends(get_booking_session_use_case),
):
    try:
        services = await uc.list_services(page=page, per_page=per_page)
    except BookingFlowError as e:
        raise _http_error(e)
    return [ServiceSchema.model_validate(s) for s in services]


@router.get("/services/{service_id}/time-slots", response_model=list[TimeSlotSchema])
async def list_time_slots(
    service_id: str,
    day: dt.date | None = Query(None, alias="date"),
    uc: BookingSessionUseCase = Depends(get_booking_session_use_case),
):
    try:
        slots = await uc.time_slots(service_id, day)
    except BookingFlowError as e:
        raise _http_error(e)
    return [TimeSlotSchema.model_validate(s) for s in slots]


@router.post("/sessions", response_model=BookingSessionSchema, status_code=201)
async def start_session(
    req: StartSessionRequestSchema,
    uc: BookingSessionUseCase = Depends(get_booking_session_use_case),
):
    try:
        session_id, flow = await uc.start(service_id=req.service_id)
    except BookingFlowError as e:
        raise _http_error(e)
    return _session_response(session_id, flow)


@router.get("/sessions/{session_id}", response_model=BookingSessionSchema)
def get_session(
    session_id: str,
    uc: BookingSessionUseCase = Depends(get_booking_session_use_case),
):
    try:
        flow = uc.get(session_id)
    except BookingFlowError as e:
        raise _http_error(e)
    return _session_response(session_id, flow)


@router.patch("/sessions/{session_id}", response_model=BookingSessionSchema)
async def update_session(
    session_id: str,
    req: BookingUpdateSchema,
    uc: BookingSessionUseCase = Depends(get_booking_session_use_case),
):
    try:
        flow = uc.get(session_id)
        flow.update(await _to_update(req, flow, uc))
    except BookingFlowError as e:
        raise _http_error(e)
    return _session_response(session_id, flow)


@router.post("/sessions/{session_id}/advance", response_model=BookingSessionSchema)
def advance_session(
    session_id: str,
    uc: BookingSessionUseCase = Depends(get_booking_session_use_case),
):
    try:
        flow = uc.get(session_id)
        flow.advance()
    except BookingFlowError as e:
        raise _http_error(e)
    return _session_response(session_id, flow)


@router.post("/sessions/{session_id}/retreat", response_model=BookingSessionSchema)
def retreat_session(
    session_id: str,
    req: RetreatRequestSchema,
    uc: BookingSessionUseCase = Depends(get_booking_session_use_case),
):
    try:
        flow = uc.get(session_id)
        flow.retreat(req.step_id)
    except BookingFlowError as e:
        raise _http_error(e)
    return _session_response(session_id, flow)


@router.post("/sessions/{session_id}/submit", response_model=SubmitResponseSchema)
async def submit_session(
    session_id: str,
    uc: BookingSessionUseCase = Depends(get_booking_session_use_case),
    auth: AuthPort = Depends(get_auth),
):
    try:
        flow = uc.get(session_id)
        result = await flow.submit(auth)
    except BookingFlowError as e:
        raise _http_error(e)

    if result.action == "booked":
        uc.abandon(session_id)
    return SubmitResponseSchema(
        action=result.action,
        booking=BookingSchema.model_validate(result.booking) if result.booking else None,
        redirect_url=result.redirect_url,
    )


@router.delete("/sessions/{session_id}", status_code=204)
def abandon_session(
    session_id: str,
    uc: BookingSessionUseCase = Depends(get_booking_session_use_case),
):
    try:
        uc.abandon(session_id)
    except BookingFlowError as e:
        raise _http_error(e)
    return Response(status_code=204)
