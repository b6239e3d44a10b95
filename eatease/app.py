from __future__ import annotations

from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .auth.dependencies import require_admin, require_user
from .auth.models import LoginRequest, SignupRequest
from .auth.users import authenticate, register
from .config import DEFAULT_APP_CONFIG
from .recommendations.models import (
    Preferences,
    RecommendationRequest,
    RecommendationResponse,
    Restaurant,
)
from .recommendations.ranking import get_recommendations
from .reservations.models import (
    Availability,
    Reservation,
    ReservationCreate,
    StatusUpdate as ReservationStatusUpdate,
)
from .reservations.repository import InMemoryReservationRepository
from .reservations.service import (
    CapacityExceeded,
    ReservationError,
    ReservationService,
)
from .restaurants.bookmarks import bookmark_count, get_bookmarks, toggle_bookmark
from .restaurants.data_store import get_cuisines, get_restaurant, get_restaurants
from .restaurants.occupancy import (
    OccupancyUpdate,
    StatusUpdate,
    apply_occupancy,
    set_status,
    simulate_all,
)
from .restaurants.promotions import (
    Promotion,
    PromotionCreate,
    create_promotion,
    get_active_promotions,
)
from .restaurants.reviews import (
    Review,
    ReviewCreate,
    ReviewSummary,
    delete_review,
    get_review,
    submit_review,
    summarize,
)

app = FastAPI(title="EatEase API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_APP_CONFIG.session_secret)

reservation_repository = InMemoryReservationRepository()
reservation_service = ReservationService(reservation_repository)


def _restaurant_or_404(restaurant_id: int) -> Restaurant:
    restaurant = get_restaurant(restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


def _http_error(exc: ReservationError) -> HTTPException:
    if isinstance(exc, CapacityExceeded):
        return HTTPException(
            status_code=exc.status_code,
            detail={"message": str(exc), "available_capacity": exc.available_capacity},
        )
    return HTTPException(status_code=exc.status_code, detail=str(exc))


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return {
        "cuisines": get_cuisines(),
        "crowd_tolerances": ["low", "medium", "high"],
    }


@app.get("/restaurants", response_model=list[Restaurant])
def list_restaurants() -> list[Restaurant]:
    return get_restaurants()


@app.get("/restaurants/{restaurant_id}", response_model=Restaurant)
def restaurant_detail(restaurant_id: int) -> Restaurant:
    return _restaurant_or_404(restaurant_id)


@app.get("/promotions", response_model=list[Promotion])
def promotions() -> list[Promotion]:
    return get_active_promotions()


@app.get("/restaurants/{restaurant_id}/promotions", response_model=list[Promotion])
def restaurant_promotions(restaurant_id: int) -> list[Promotion]:
    _restaurant_or_404(restaurant_id)
    return get_active_promotions(restaurant_id)


@app.get("/restaurants/{restaurant_id}/reviews", response_model=ReviewSummary)
def restaurant_reviews(restaurant_id: int) -> ReviewSummary:
    _restaurant_or_404(restaurant_id)
    return summarize(restaurant_id)


@app.get("/restaurants/{restaurant_id}/availability", response_model=Availability)
def availability(
    restaurant_id: int,
    on: date = Query(..., alias="date"),
    party_size: int = Query(..., ge=1, le=DEFAULT_APP_CONFIG.max_party_size),
) -> Availability:
    if on < date.today():
        raise HTTPException(status_code=422, detail="Date must be today or later")
    try:
        return reservation_service.check_availability(restaurant_id, on, party_size)
    except ReservationError as exc:
        raise _http_error(exc)


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/signup")
def signup(body: SignupRequest, request: Request) -> dict:
    user = register(body.username, body.password, body.name)
    if not user:
        raise HTTPException(status_code=409, detail="User already exists")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Diner endpoints ──────────────────────────────────────────────────────


def _session_preferences(request: Request) -> Preferences:
    raw = request.session.get("preferences")
    return Preferences(**raw) if raw else Preferences()


@app.get("/preferences", response_model=Preferences)
def get_preferences(request: Request, user: dict = Depends(require_user)) -> Preferences:
    return _session_preferences(request)


@app.put("/preferences", response_model=Preferences)
def save_preferences(
    body: Preferences,
    request: Request,
    user: dict = Depends(require_user),
) -> Preferences:
    request.session["preferences"] = body.model_dump()
    return body


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: RecommendationRequest,
    request: Request,
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    preferences = body.preferences or _session_preferences(request)
    return get_recommendations(body, preferences)


@app.get("/reservations", response_model=list[Reservation])
def my_reservations(user: dict = Depends(require_user)) -> list[Reservation]:
    return reservation_service.list_reservations(user["username"])


@app.post("/reservations", response_model=Reservation, status_code=201)
def create_reservation(
    body: ReservationCreate,
    user: dict = Depends(require_user),
) -> Reservation:
    try:
        return reservation_service.create_reservation(user["username"], body)
    except ReservationError as exc:
        raise _http_error(exc)


@app.get("/reservations/{reservation_id}", response_model=Reservation)
def reservation_detail(
    reservation_id: int,
    user: dict = Depends(require_user),
) -> Reservation:
    try:
        return reservation_service.get_reservation(user["username"], reservation_id)
    except ReservationError as exc:
        raise _http_error(exc)


@app.post("/reservations/{reservation_id}/cancel", response_model=Reservation)
def cancel_reservation(
    reservation_id: int,
    user: dict = Depends(require_user),
) -> Reservation:
    try:
        return reservation_service.cancel_reservation(user["username"], reservation_id)
    except ReservationError as exc:
        raise _http_error(exc)


@app.post("/restaurants/{restaurant_id}/reviews", response_model=Review)
def post_review(
    restaurant_id: int,
    body: ReviewCreate,
    user: dict = Depends(require_user),
) -> Review:
    if user.get("role") != "diner":
        raise HTTPException(status_code=403, detail="Only diners can submit reviews")
    review = submit_review(restaurant_id, user["username"], body)
    if review is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return review


@app.delete("/reviews/{review_id}", response_model=Review)
def remove_review(review_id: int, user: dict = Depends(require_user)) -> Review:
    review = get_review(review_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    if review.user != user["username"] and user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Not your review")
    return delete_review(review_id)


@app.get("/bookmarks", response_model=list[Restaurant])
def my_bookmarks(user: dict = Depends(require_user)) -> list[Restaurant]:
    return get_bookmarks(user["username"])


@app.post("/bookmarks/{restaurant_id}")
def bookmark(restaurant_id: int, user: dict = Depends(require_user)) -> dict:
    is_bookmarked = toggle_bookmark(user["username"], restaurant_id)
    if is_bookmarked is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return {
        "restaurant_id": restaurant_id,
        "is_bookmarked": is_bookmarked,
        "bookmark_count": bookmark_count(restaurant_id),
    }


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.post("/restaurants/iot-update", response_model=list[Restaurant])
def iot_update(user: dict = Depends(require_admin)) -> list[Restaurant]:
    return simulate_all()


@app.post("/restaurants/{restaurant_id}/status", response_model=Restaurant)
def update_status(
    restaurant_id: int,
    body: StatusUpdate,
    user: dict = Depends(require_admin),
) -> Restaurant:
    restaurant = _restaurant_or_404(restaurant_id)
    return set_status(restaurant, body.status, body.crowd_level)


@app.post("/restaurants/{restaurant_id}/occupancy", response_model=Restaurant)
def update_occupancy(
    restaurant_id: int,
    body: OccupancyUpdate,
    user: dict = Depends(require_admin),
) -> Restaurant:
    restaurant = _restaurant_or_404(restaurant_id)
    return apply_occupancy(restaurant, body.occupancy)


@app.post("/promotions", response_model=Promotion, status_code=201)
def add_promotion(
    body: PromotionCreate,
    user: dict = Depends(require_admin),
) -> Promotion:
    promotion = create_promotion(body)
    if promotion is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return promotion


@app.post("/reservations/{reservation_id}/status", response_model=Reservation)
def set_reservation_status(
    reservation_id: int,
    body: ReservationStatusUpdate,
    user: dict = Depends(require_admin),
) -> Reservation:
    try:
        return reservation_service.update_status(reservation_id, body.status)
    except ReservationError as exc:
        raise _http_error(exc)


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())
