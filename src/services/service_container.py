"""Service Container - Dependency injection container for all core services"""

from dataclasses import dataclass
from typing import Optional

from engine.animation_mixer import AnimationMixer
from engine.camera_rig import CameraRig
from engine.render_loop import RenderLoop
from managers.asset_manager import AssetManager
from managers.config_manager import ConfigManager
from services.book_state_machine import BookStateMachine
from services.book_viewer import BookViewer
from services.clip_library import ClipLibrary
from services.completion_signal import CompletionSignal
from services.conflict_resolver import ConflictResolver
from services.event_broadcaster import EventBroadcaster
from services.event_bus import EventBus
from services.part_state_store import PartStateStore
from services.playback_driver import PlaybackDriver


@dataclass
class ServiceContainer:
    """
    Centralized dependency injection container for all core services and managers.

    Aggregates the book core (library, store, driver, resolver, completion
    signal, state machine), the engine pieces (mixer, render loop, camera
    rig) and the infrastructure (config, assets, event bus, broadcaster)
    needed by API endpoints and the entry point.

    Usage:
        services = ServiceContainer.build(config_manager, asset_manager)
        set_service_container(services)

        @router.get("/book/parts")
        async def list_parts(services: ServiceContainer = Depends(get_service_container)):
            return services.viewer.describe_parts()
    """

    config_manager: ConfigManager
    asset_manager: AssetManager
    event_bus: EventBus
    library: ClipLibrary
    store: PartStateStore
    mixer: AnimationMixer
    completion_signal: CompletionSignal
    driver: PlaybackDriver
    resolver: ConflictResolver
    state_machine: BookStateMachine
    viewer: BookViewer
    render_loop: RenderLoop
    camera_rig: CameraRig
    broadcaster: Optional[EventBroadcaster] = None

    @classmethod
    def build(
        cls,
        config_manager: ConfigManager,
        asset_manager: AssetManager,
        event_bus: Optional[EventBus] = None,
        broadcaster: Optional[EventBroadcaster] = None
    ) -> "ServiceContainer":
        """Wire the object graph from the loaded configuration"""
        config = config_manager.config
        event_bus = event_bus or EventBus()

        library = ClipLibrary()
        store = PartStateStore()
        mixer = AnimationMixer()
        completion_signal = CompletionSignal(event_bus)
        driver = PlaybackDriver(mixer, completion_signal, event_bus)
        resolver = ConflictResolver(driver)
        state_machine = BookStateMachine(
            library, store, driver, resolver, completion_signal, event_bus,
            policy=config.cascade
        )
        viewer = BookViewer(library, store, driver, state_machine, event_bus)

        return cls(
            config_manager=config_manager,
            asset_manager=asset_manager,
            event_bus=event_bus,
            library=library,
            store=store,
            mixer=mixer,
            completion_signal=completion_signal,
            driver=driver,
            resolver=resolver,
            state_machine=state_machine,
            viewer=viewer,
            render_loop=RenderLoop(driver, config.render_loop),
            camera_rig=CameraRig(config.camera),
            broadcaster=broadcaster,
        )
