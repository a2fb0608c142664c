import datetime as dt
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class AddOnSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: float
    duration: int = 0
    description: str = ""


class ServiceSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: float
    duration: int
    business_id: str | None = None
    description: str | None = None
    provider_name: str | None = None
    provider_rating: float | None = None
    add_ons: list[AddOnSchema] = Field(default_factory=list)


class TimeSlotSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    start_time: dt.datetime
    end_time: dt.datetime
    service_id: str | None = None
    is_available: bool = True


class StaffMemberSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    specialties: list[str] = Field(default_factory=list)
    rating: float | None = None
    reviews_count: int = 0


class CustomerInfoSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    emergency_contact: str | None = None
    accessibility_needs: str | None = None


class BookingDraftSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    service: ServiceSchema | None = None
    date: dt.date | None = None
    time_slot: TimeSlotSchema | None = None
    staff_member: StaffMemberSchema | None = None
    selected_add_ons: list[AddOnSchema] = Field(default_factory=list)
    special_requests: str = ""
    customer_info: CustomerInfoSchema
    payment_method: str = ""
    promo_code: str | None = None
    subtotal: float
    discount: float
    total: float


class BookingStepSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    completed: bool
    current: bool


class BookingSessionSchema(BaseModel):
    session_id: str
    current_step: str
    progress: float
    can_advance: bool
    is_submitting: bool
    steps: list[BookingStepSchema]
    draft: BookingDraftSchema


class StartSessionRequestSchema(BaseModel):
    service_id: str | None = None


class RetreatRequestSchema(BaseModel):
    step_id: str


class SelectServiceSchema(BaseModel):
    type: Literal["service"]
    service_id: str


class SelectDateTimeSchema(BaseModel):
    type: Literal["datetime"]
    date: dt.date
    time_slot_id: str | None = None


class SelectStaffSchema(BaseModel):
    type: Literal["staff"]
    staff: StaffMemberSchema | None = None  # None means any available staff


class ToggleAddOnSchema(BaseModel):
    type: Literal["addon"]
    add_on_id: str


class SpecialRequestsSchema(BaseModel):
    type: Literal["special_requests"]
    text: str


class CommonRequestSchema(BaseModel):
    type: Literal["common_request"]
    request_id: str


class CustomerInfoUpdateSchema(BaseModel):
    type: Literal["customer_info"]
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    emergency_contact: str | None = None
    accessibility_needs: str | None = None


class PaymentUpdateSchema(BaseModel):
    type: Literal["payment"]
    payment_method: str | None = None
    promo_code: str | None = None


BookingUpdateSchema = Annotated[
    Union[
        SelectServiceSchema,
        SelectDateTimeSchema,
        SelectStaffSchema,
        ToggleAddOnSchema,
        SpecialRequestsSchema,
        CommonRequestSchema,
        CustomerInfoUpdateSchema,
        PaymentUpdateSchema,
    ],
    Field(discriminator="type"),
]


class BookingSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    service_id: str
    time_slot_id: str
    status: str
    user_id: str | None = None
    business_id: str | None = None
    service_name: str | None = None
    start_time: dt.datetime | None = None
    end_time: dt.datetime | None = None
    notes: str | None = None


class SubmitResponseSchema(BaseModel):
    action: str
    booking: BookingSchema | None = None
    redirect_url: str | None = None


class AvailabilityWindowsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    today: bool
    tomorrow: bool
    this_week: bool
    next_week: bool


class NextAvailableSlotSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str
    time: str


class ProviderSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    business_name: str
    category: str
    rating: float
    review_count: int
    starting_price: float
    distance: str
    description: str
    address: str
    city: str
    state: str
    zip_code: str
    next_available_slot: NextAvailableSlotSchema | None = None
    availability_windows: AvailabilityWindowsSchema
    is_favorite: bool


class SearchStatsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_results: int
    has_active_filters: bool
    active_filter_count: int
    query: str


class CategorySuggestionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    count: int


class PriceRangeSuggestionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    min: float
    max: float
    average: int


class SearchResponseSchema(BaseModel):
    providers: list[ProviderSchema]
    stats: SearchStatsSchema
    category_suggestions: list[CategorySuggestionSchema]
    price_range: PriceRangeSuggestionSchema | None = None
    params: dict[str, str] = Field(default_factory=dict)


class FavoriteToggleSchema(BaseModel):
    provider_id: str
    is_favorite: bool
