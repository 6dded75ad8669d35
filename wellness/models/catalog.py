"""Static service catalog for the wellness marketplace."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

ALL_CATEGORIES = "All"


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class ServiceListing:
    """A bookable, HSA-eligible service offered on the marketplace."""

    id: str
    name: str
    category: str
    description: str
    price: float
    duration: str
    provider: str
    rating: float
    image: str
    hsa_eligible: bool
    conditions: tuple[str, ...]
    location: str
    address: str
    coordinates: Coordinates
    detailed_description: str = ""
    what_to_expect: tuple[str, ...] = ()
    preparation_instructions: tuple[str, ...] = ()
    cancellation_policy: str = ""

    def matches(self, search_text: str) -> bool:
        """Return whether the name, description or provider contains ``search_text``."""

        needle = search_text.strip().lower()
        if not needle:
            return True
        return any(
            needle in value.lower() for value in (self.name, self.description, self.provider)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "price": self.price,
            "duration": self.duration,
            "provider": self.provider,
            "rating": self.rating,
            "image": self.image,
            "hsaEligible": self.hsa_eligible,
            "conditions": list(self.conditions),
            "location": self.location,
            "address": self.address,
            "coordinates": {"lat": self.coordinates.lat, "lng": self.coordinates.lng},
            "detailedDescription": self.detailed_description,
            "whatToExpect": list(self.what_to_expect),
            "preparationInstructions": list(self.preparation_instructions),
            "cancellationPolicy": self.cancellation_policy,
        }


_STANDARD_CANCELLATION = (
    "Cancellations must be made at least 24 hours in advance to avoid a cancellation fee of $25."
)

SERVICES: tuple[ServiceListing, ...] = (
    ServiceListing(
        id="1",
        name="Tension-Intervention",
        category="Wellness",
        description="Functional Mobility and Injury Prevention for Life Long Health",
        price=225.0,
        duration="Starts from 60 minutes",
        provider="Tension Intervention",
        rating=4.9,
        image=(
            "https://images.squarespace-cdn.com/content/v1/6665beb550937144dac7cf76/"
            "1717946838332-PROZTO5JOSX4W1FRFV1I/Massage+Therapy"
        ),
        hsa_eligible=True,
        conditions=(
            "Low Back Pain",
            "Shoulder Pain",
            "Knee Pain",
            "Elbow Pain",
            "Hip Pain",
            "Ankle Pain",
            "Foot Pain",
            "Hand Pain",
            "Wrist Pain",
            "Neck Pain",
            "Headache",
        ),
        location="Greenpoint/Williamsburg",
        address="252 Java Street, Brooklyn, NY 11222",
        coordinates=Coordinates(lat=40.7197, lng=-74.0085),
        detailed_description=(
            "Hands-on mobility work and corrective exercise aimed at resolving pain and "
            "preventing injury so you can stay active for life."
        ),
        what_to_expect=(
            "Movement assessment",
            "Soft tissue work",
            "Functional Mobility",
            "Injury Prevention",
        ),
        preparation_instructions=(
            "Wear comfortable clothing you can move in",
            "Bring a list of current injuries or surgeries",
            "Arrive 10 minutes early for intake",
        ),
        cancellation_policy=_STANDARD_CANCELLATION,
    ),
    ServiceListing(
        id="2",
        name="Your Dream Spa",
        category="Wellness",
        description=(
            "Your Dream Spa is a luxurious spa that offers a variety of services to help "
            "you relax and de-stress."
        ),
        price=0.01,
        duration="Starts from 60 minutes",
        provider="Your Dream Spa",
        rating=5.0,
        image=(
            "https://lh3.googleusercontent.com/p/"
            "AF1QipOubx9ehbcqt465azaPoC8NGqnwTHClYUVZSIlB=w408-h305-k-no"
        ),
        hsa_eligible=True,
        conditions=("Stress", "Muscle Tension"),
        location="Fidi",
        address="6 Stone St 2 Floor, New York, NY 10004",
        coordinates=Coordinates(lat=40.7038, lng=-74.0125),
        detailed_description="Massage and recovery treatments in a calm downtown space.",
        what_to_expect=("Consultation", "Massage", "Recovery tips"),
        preparation_instructions=("Note any allergies to oils or lotions",),
        cancellation_policy=_STANDARD_CANCELLATION,
    ),
    ServiceListing(
        id="3",
        name="Nutritional Counseling",
        category="Nutrition",
        description="One-on-one sessions with a registered dietitian.",
        price=150.0,
        duration="60 minutes",
        provider="Harbor Nutrition",
        rating=4.8,
        image="/static/img/nutrition.jpg",
        hsa_eligible=True,
        conditions=("Diabetes", "High Blood Pressure", "Weight Management", "Heart Disease"),
        location="Midtown",
        address="456 Park Avenue, New York, NY 10022",
        coordinates=Coordinates(lat=40.7614, lng=-73.9712),
        detailed_description=(
            "Our registered dietitians provide comprehensive nutritional counseling to help "
            "you achieve your health goals. Whether you're managing a chronic condition, "
            "looking to improve your overall wellness, or seeking weight management support, "
            "our personalized approach ensures you receive evidence-based nutrition guidance "
            "that fits your lifestyle."
        ),
        what_to_expect=(
            "Review of your health history",
            "Personalized meal planning",
            "Follow-up recommendations",
        ),
        preparation_instructions=(
            "Bring a list of your current medications and supplements",
            "Note any food allergies or intolerances",
            "Consider your lifestyle and cooking preferences",
            "Prepare questions about your health goals",
        ),
        cancellation_policy=_STANDARD_CANCELLATION,
    ),
    ServiceListing(
        id="4",
        name="Fitness Training Session",
        category="Fitness",
        description="1-1 and couples training sessions to achieve individual goals.",
        price=225.0,
        duration="60 minutes",
        provider="Coach Jared",
        rating=4.9,
        image="/static/img/training.jpg",
        hsa_eligible=True,
        conditions=("Obesity", "High Blood Pressure", "Diabetes", "Heart Disease"),
        location="Williamsburg",
        address="120 Kent Avenue, Brooklyn, NY 11249",
        coordinates=Coordinates(lat=40.7209, lng=-73.9614),
        what_to_expect=(
            "Powerlifting Technique",
            "Weight Loss",
            "Sport Performance",
            "Injury Prevention",
            "Functional Mobility",
            "Nutrition Coaching",
        ),
        preparation_instructions=("Wear training shoes", "Bring water"),
        cancellation_policy=_STANDARD_CANCELLATION,
    ),
)

APPOINTMENT_TIMES: tuple[str, ...] = (
    "9:00 AM",
    "10:00 AM",
    "11:00 AM",
    "1:00 PM",
    "2:00 PM",
    "3:00 PM",
    "4:00 PM",
)


def get_service(service_id: str, services: Iterable[ServiceListing] = SERVICES) -> ServiceListing | None:
    """Return the listing with ``service_id`` or ``None``."""

    for service in services:
        if service.id == service_id:
            return service
    return None


def categories(services: Sequence[ServiceListing] = SERVICES) -> list[str]:
    """Return ``All`` followed by each distinct category in catalog order."""

    result = [ALL_CATEGORIES]
    for service in services:
        if service.category not in result:
            result.append(service.category)
    return result


def filter_services(
    category: str | None = None,
    search_text: str | None = None,
    services: Sequence[ServiceListing] = SERVICES,
) -> list[ServiceListing]:
    """Filter listings by exact category and case-insensitive search text."""

    selected = list(services)
    if category and category != ALL_CATEGORIES:
        selected = [service for service in selected if service.category == category]
    if search_text:
        selected = [service for service in selected if service.matches(search_text)]
    return selected
