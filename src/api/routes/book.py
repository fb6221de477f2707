"""
Book Endpoints - HTTP routes for latch, cover and page control

Every state-changing endpoint forwards to the state machine and reports
the TransitionOutcome. A REJECTED outcome is a regular 200 response: the
request was understood, the book just does not allow it right now. The
warning itself is streamed on /ws/events.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_service_container
from api.middleware.error_handler import (
    InvalidPartStateError,
    ModelNotLoadedError,
    PartNotFoundError,
)
from api.schemas.book import (
    ClipListResponse,
    ClipResponse,
    ModelLoadResponse,
    PartListResponse,
    PartResponse,
    PartStateRequest,
    PlaybackListResponse,
    PlaybackResponse,
    TransitionResponse,
)
from models.domain.part import Part, FRONT_COVER
from models.enums import LogCategory, PartState, TransitionOutcome
from services.book_viewer import BookViewer
from services.service_container import ServiceContainer
from utils.logger import get_logger
from utils.serialization import Serializer

log = get_logger().for_category(LogCategory.API)

router = APIRouter(
    prefix="/book",
    tags=["Book"],
)


async def get_viewer(
    services: ServiceContainer = Depends(get_service_container)
) -> BookViewer:
    """BookViewer with a loaded model"""
    if not services.viewer.loaded:
        raise ModelNotLoadedError()
    return services.viewer


def resolve_part(viewer: BookViewer, part_id: str) -> Part:
    """Parse LATCH / FRONT_COVER / PAGE_<n> and check the model has it"""
    valid = [p.key for p in viewer.library.parts()]
    try:
        part = Serializer.str_to_part(part_id)
    except ValueError:
        raise PartNotFoundError(part_id, valid)
    if not viewer.knows(part):
        raise PartNotFoundError(part_id, valid)
    return part


def parse_state(value: str) -> PartState:
    try:
        return Serializer.str_to_enum(value, PartState)
    except ValueError:
        raise InvalidPartStateError(value, [s.name for s in PartState])


def _transition(viewer: BookViewer, part: Part, outcome: TransitionOutcome) -> TransitionResponse:
    return TransitionResponse(
        outcome=outcome.name,
        part=PartResponse(**viewer.describe_part(part))
    )


# ============================================================================
# GET ENDPOINTS
# ============================================================================

@router.get(
    "/parts",
    response_model=PartListResponse,
    summary="List all parts",
    description="Latch, front cover and every page with recorded state and in-flight direction"
)
async def list_parts(viewer: BookViewer = Depends(get_viewer)) -> PartListResponse:
    return PartListResponse(
        parts=[PartResponse(**p) for p in viewer.describe_parts()],
        book_open=viewer.is_book_open()
    )


@router.get(
    "/parts/{part_id}",
    response_model=PartResponse,
    summary="Get one part"
)
async def get_part(part_id: str, viewer: BookViewer = Depends(get_viewer)) -> PartResponse:
    part = resolve_part(viewer, part_id)
    return PartResponse(**viewer.describe_part(part))


@router.get(
    "/clips",
    response_model=ClipListResponse,
    summary="List clips with their classification"
)
async def list_clips(viewer: BookViewer = Depends(get_viewer)) -> ClipListResponse:
    return ClipListResponse(clips=[
        ClipResponse(**Serializer.clip_to_dict(clip, classification))
        for clip, classification in viewer.library.classified()
    ])


@router.get(
    "/playbacks",
    response_model=PlaybackListResponse,
    summary="List in-flight playbacks"
)
async def list_playbacks(viewer: BookViewer = Depends(get_viewer)) -> PlaybackListResponse:
    driver = viewer.driver
    return PlaybackListResponse(playbacks=[
        PlaybackResponse(**Serializer.playback_to_dict(p, driver.position(p.clip_name)))
        for p in driver.active()
    ])


# ============================================================================
# STATE-CHANGING ENDPOINTS
# ============================================================================

@router.put(
    "/parts/{part_id}/state",
    response_model=TransitionResponse,
    summary="Request a part state",
    description="Open or close a part; prerequisite and dependent parts cascade as needed"
)
async def request_part_state(
    part_id: str,
    request: PartStateRequest,
    viewer: BookViewer = Depends(get_viewer)
) -> TransitionResponse:
    part = resolve_part(viewer, part_id)
    desired = parse_state(request.state)

    outcome = await viewer.request_state(part, desired)
    log.debug(f"PUT state {part.key} → {desired.name}: {outcome.name}")
    return _transition(viewer, part, outcome)


@router.post(
    "/parts/{part_id}/toggle",
    response_model=TransitionResponse,
    summary="Toggle a part",
    description="Reverse the in-flight transition, or request the opposite of the recorded state"
)
async def toggle_part(part_id: str, viewer: BookViewer = Depends(get_viewer)) -> TransitionResponse:
    part = resolve_part(viewer, part_id)
    outcome = await viewer.toggle(part)
    return _transition(viewer, part, outcome)


@router.post("/open", response_model=TransitionResponse, summary="Open latch and front cover")
async def open_book(viewer: BookViewer = Depends(get_viewer)) -> TransitionResponse:
    outcome = await viewer.open_book()
    return _transition(viewer, FRONT_COVER, outcome)


@router.post("/close", response_model=TransitionResponse, summary="Close pages, front cover and latch")
async def close_book(viewer: BookViewer = Depends(get_viewer)) -> TransitionResponse:
    outcome = await viewer.close_book()
    return _transition(viewer, FRONT_COVER, outcome)


@router.post(
    "/reload",
    response_model=ModelLoadResponse,
    summary="Reload the configured book manifest",
    description="Halts playbacks, rediscovers parts and resets every part to CLOSED"
)
async def reload_model(
    services: ServiceContainer = Depends(get_service_container)
) -> ModelLoadResponse:
    model_path = services.config_manager.model_path
    if model_path is None:
        raise ModelNotLoadedError("No model path configured")

    scene = services.asset_manager.load_manifest(model_path)
    parts = await services.viewer.load_model(scene)
    return ModelLoadResponse(
        model=scene.name,
        clips=len(scene.clips),
        parts=[p.key for p in parts],
        missing_tracks=len(scene.missing_bindings())
    )
