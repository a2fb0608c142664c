from __future__ import annotations

from datetime import date, timedelta

from bookflow.application.ports.provider_source import ProviderSourcePort
from bookflow.domain.entities.provider import AvailabilityWindows, NextAvailableSlot, ServiceProvider

# id, name, business_name, category, rating, review_count, price, distance,
# description, address, city, state, zip, (days_ahead, time), (today, tomorrow, this_week, next_week)
_PROVIDER_ROWS = (
    ("1", "Sarah Johnson", "Elite Hair Studio", "Hair & Beauty", 4.9, 156, 45, "0.3 miles",
     "Specializing in cuts, color, and styling", "123 Main Street", "New York", "NY", "10001",
     (0, "10:30"), (True, True, True, False)),
    ("2", "Dr. Michael Chen", "Downtown Medical Center", "Healthcare", 4.8, 89, 120, "0.7 miles",
     "General practice and preventive care", "456 Broadway Ave", "New York", "NY", "10002",
     (1, "14:00"), (False, True, True, True)),
    ("3", "Alex Rodriguez", "FitLife Personal Training", "Fitness & Wellness", 4.7, 234, 75, "1.2 miles",
     "Personal training and nutrition coaching", "789 Fitness Blvd", "Brooklyn", "NY", "11201",
     (0, "16:00"), (True, True, True, True)),
    ("4", "Jennifer Park", "Zen Massage Therapy", "Fitness & Wellness", 4.9, 167, 85, "0.5 miles",
     "Therapeutic and relaxation massage", "321 Wellness Way", "New York", "NY", "10003",
     (0, "11:00"), (True, False, True, True)),
    ("5", "Robert Wilson", "Wilson Home Repairs", "Home Services", 4.6, 198, 65, "2.1 miles",
     "Plumbing, electrical, and general repairs", "654 Service Lane", "Queens", "NY", "11101",
     (3, "09:00"), (False, False, True, True)),
    ("6", "Lisa Thompson", "AutoCare Plus", "Automotive", 4.5, 143, 89, "1.8 miles",
     "Oil changes, tune-ups, and repairs", "987 Auto Street", "Brooklyn", "NY", "11205",
     (1, "08:00"), (False, True, True, False)),
    ("7", "David Martinez", "Martinez Legal Services", "Professional Services", 4.8, 76, 150, "0.9 miles",
     "Business law and contracts", "147 Legal Plaza", "New York", "NY", "10004",
     (8, "13:00"), (False, False, False, True)),
    ("8", "Emily Davis", "Happy Paws Grooming", "Pet Care", 4.9, 289, 35, "1.5 miles",
     "Professional pet grooming and care", "258 Pet Paradise Dr", "Manhattan", "NY", "10010",
     (0, "13:30"), (True, True, True, True)),
    ("9", "James Wilson", "Wilson Tutoring Center", "Education", 4.7, 112, 55, "2.3 miles",
     "Math, science, and test prep tutoring", "369 Education Ave", "Bronx", "NY", "10451",
     (4, "15:00"), (False, False, True, True)),
    ("10", "Maria Garcia", "Glow Aesthetics", "Hair & Beauty", 4.8, 203, 65, "0.8 miles",
     "Facials, skincare, and beauty treatments", "741 Beauty Boulevard", "New York", "NY", "10005",
     (0, "12:00"), (True, True, True, False)),
    ("11", "Michael Johnson", "Tech Solutions Pro", "Professional Services", 4.6, 95, 125, "3.2 miles",
     "IT consulting and computer repair services", "852 Tech Avenue", "San Francisco", "CA", "94102",
     (0, "17:00"), (True, True, True, True)),
    ("12", "Amanda Rodriguez", "Flex Yoga Studio", "Fitness & Wellness", 4.8, 178, 55, "1.7 miles",
     "Yoga classes and mindfulness training", "963 Wellness Street", "Los Angeles", "CA", "90210",
     (0, "18:00"), (True, False, True, True)),
)

DEFAULT_FAVORITES: frozenset[str] = frozenset({"2", "6", "10"})


def build_static_providers(today: date | None = None) -> list[ServiceProvider]:
    today = today or date.today()
    providers: list[ServiceProvider] = []
    for row in _PROVIDER_ROWS:
        (
            provider_id, name, business_name, category, rating, review_count, price, distance,
            description, address, city, state, zip_code, (days_ahead, time), windows,
        ) = row
        providers.append(
            ServiceProvider(
                id=provider_id,
                name=name,
                business_name=business_name,
                category=category,
                rating=rating,
                review_count=review_count,
                starting_price=price,
                distance=distance,
                description=description,
                address=address,
                city=city,
                state=state,
                zip_code=zip_code,
                next_available_slot=NextAvailableSlot(
                    date=(today + timedelta(days=days_ahead)).isoformat(),
                    time=time,
                ),
                availability_windows=AvailabilityWindows(*windows),
            )
        )
    return providers


class StaticProviderSource(ProviderSourcePort):
    def __init__(self, providers: list[ServiceProvider] | None = None) -> None:
        self._providers = providers if providers is not None else build_static_providers()

    async def list_providers(self) -> list[ServiceProvider]:
        return list(self._providers)
