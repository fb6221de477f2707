"""
Config Manager

Main configuration manager with include system support.
Loads modular YAML files and builds the typed ViewerConfig.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar
from enum import Enum

from models.domain.camera import CameraView, PanLimit, Vec3
from models.domain.config import (
    ApiConfig,
    CameraConfig,
    CascadePolicy,
    LoggingConfig,
    RenderLoopConfig,
    ViewerConfig,
)
from models.enums import ClosedBookPagePolicy, LaterPagesPolicy, LogLevel
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)

E = TypeVar("E", bound=Enum)

SRC_DIR = Path(__file__).parent.parent


class ConfigManager:
    """
    Main configuration manager with include system support

    Loads config.yaml and processes include: directive to load modular YAML files.
    Unknown or invalid values fall back to their defaults with a warning.

    Example:
        config_manager = ConfigManager()
        config_manager.load()

        config_manager.config.cascade.closed_book_pages   # ClosedBookPagePolicy
        config_manager.model_path                         # Path to book manifest
    """

    def __init__(self, config_path="config/config.yaml", defaults_path="config/factory_defaults.yaml"):
        """
        Args:
            config_path: Path to main config.yaml (relative to src/ unless absolute)
            defaults_path: Path to factory defaults fallback
        """
        self.config_path = Path(config_path)
        self.factory_defaults_path = Path(defaults_path)
        self.data: Dict[str, Any] = {}
        self.config: ViewerConfig = ViewerConfig()

    def load(self) -> ViewerConfig:
        """
        Load YAML configuration with include system support

        Process:
        1. Load main config.yaml
        2. If it has 'include:' list, load and merge those files
        3. Otherwise treat as monolithic config
        4. Fallback to factory_defaults.yaml on failure
        5. Build the typed ViewerConfig
        """
        full_path = self._resolve(self.config_path)
        try:
            with open(full_path, "r", encoding="utf-8") as f:
                main_config = yaml.safe_load(f) or {}

            if 'include' in main_config:
                log.info("Using include-based configuration")
                self.data = self._load_with_includes(main_config['include'], full_path.parent)
                self.data.update({k: v for k, v in main_config.items() if k != 'include'})
            else:
                log.info("Using monolithic configuration")
                self.data = main_config

        except Exception as ex:
            log.error("Failed to load config.yaml", error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")

            with open(self._resolve(self.factory_defaults_path), "r", encoding="utf-8") as f:
                self.data = yaml.safe_load(f) or {}

        self.config = self.build_config(self.data, base_dir=full_path.parent)
        return self.config

    @property
    def model_path(self) -> Optional[Path]:
        return Path(self.config.model_path) if self.config.model_path else None

    def _resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else SRC_DIR / path

    def _load_with_includes(self, include_list: List[str], config_dir: Path) -> Dict:
        """
        Load and merge multiple YAML files from include list

        Args:
            include_list: List of filenames to load (e.g., ["viewer.yaml", "cascade.yaml"])
            config_dir: Directory containing config files

        Returns:
            Merged config dict
        """
        merged = {}

        for filename in include_list:
            filepath = config_dir / filename
            try:
                with open(filepath, 'r', encoding='utf-8') as f:
                    file_data = yaml.safe_load(f)
                    if file_data:
                        merged.update(file_data)
                        log.info(f"Loaded {filename}", keys=str(list(file_data.keys())))
            except FileNotFoundError:
                log.error(f"File not found: {filename}")
                raise
            except Exception as ex:
                log.error(f"Error loading {filename}", error=str(ex))
                raise

        log.info("Config merge complete", total_keys=len(merged), keys=str(list(merged.keys())[:10]))
        return merged

    # ===== Typed config =====

    @classmethod
    def build_config(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> ViewerConfig:
        """Typed ViewerConfig from merged YAML data"""
        model_path = (data.get("model") or {}).get("path")
        if model_path and base_dir is not None and not Path(model_path).is_absolute():
            model_path = str(base_dir / model_path)

        config = ViewerConfig(
            model_path=model_path,
            render_loop=cls._render_loop(data.get("render_loop") or {}),
            cascade=cls._cascade(data.get("cascade") or {}),
            api=cls._api(data.get("api") or {}),
            logging=cls._logging(data.get("logging") or {}),
            camera=cls._camera(data.get("camera") or {}),
        )
        log.info(
            "Viewer config built",
            model=config.model_path or "-",
            fps=config.render_loop.fps,
            closed_book_pages=config.cascade.closed_book_pages.value,
            later_pages_on_open=config.cascade.later_pages_on_open.value
        )
        return config

    @staticmethod
    def _enum(enum_type: Type[E], raw: Any, default: E, by_value: bool = True) -> E:
        if raw is None:
            return default
        try:
            return enum_type(raw) if by_value else enum_type[str(raw).upper()]
        except (KeyError, ValueError):
            log.warn(f"Invalid {enum_type.__name__}: {raw}, using {default.name}")
            return default

    @staticmethod
    def _render_loop(raw: Dict[str, Any]) -> RenderLoopConfig:
        defaults = RenderLoopConfig()
        fps = int(raw.get("fps", defaults.fps))
        if not 1 <= fps <= 240:
            log.warn(f"render_loop.fps out of range: {fps}, clamped")
            fps = max(1, min(fps, 240))
        fixed_delta = raw.get("fixed_delta", defaults.fixed_delta)
        return RenderLoopConfig(fps=fps, fixed_delta=float(fixed_delta) if fixed_delta is not None else None)

    @classmethod
    def _cascade(cls, raw: Dict[str, Any]) -> CascadePolicy:
        defaults = CascadePolicy()
        return CascadePolicy(
            closed_book_pages=cls._enum(ClosedBookPagePolicy, raw.get("closed_book_pages"), defaults.closed_book_pages),
            later_pages_on_open=cls._enum(LaterPagesPolicy, raw.get("later_pages_on_open"), defaults.later_pages_on_open),
        )

    @staticmethod
    def _api(raw: Dict[str, Any]) -> ApiConfig:
        defaults = ApiConfig()
        return ApiConfig(
            host=str(raw.get("host", defaults.host)),
            port=int(raw.get("port", defaults.port)),
            docs_enabled=bool(raw.get("docs_enabled", defaults.docs_enabled)),
            cors_origins=list(raw.get("cors_origins") or defaults.cors_origins),
        )

    @classmethod
    def _logging(cls, raw: Dict[str, Any]) -> LoggingConfig:
        defaults = LoggingConfig()
        return LoggingConfig(
            level=cls._enum(LogLevel, raw.get("level"), defaults.level, by_value=False),
            colors=bool(raw.get("colors", defaults.colors)),
        )

    @classmethod
    def _camera(cls, raw: Dict[str, Any]) -> CameraConfig:
        defaults = CameraConfig()
        pan_raw = raw.get("pan_limit") or {}
        pan_limit = PanLimit(
            enabled=bool(pan_raw.get("enabled", defaults.pan_limit.enabled)),
            radius=float(pan_raw.get("radius", defaults.pan_limit.radius)),
            origin=Vec3.from_seq(pan_raw["origin"]) if "origin" in pan_raw else defaults.pan_limit.origin,
        )
        return CameraConfig(
            desktop=cls._view(raw.get("desktop"), defaults.desktop),
            mobile=cls._view(raw.get("mobile"), defaults.mobile),
            pan_limit=pan_limit,
            fit_offset=float(raw.get("fit_offset", defaults.fit_offset)),
            mobile_min_distance=raw.get("mobile_min_distance", defaults.mobile_min_distance),
            mobile_max_distance=raw.get("mobile_max_distance", defaults.mobile_max_distance),
        )

    @staticmethod
    def _view(raw: Optional[Dict[str, Any]], default: CameraView) -> CameraView:
        if not raw:
            return default
        return CameraView(
            position=Vec3.from_seq(raw["position"]) if "position" in raw else default.position,
            target=Vec3.from_seq(raw["target"]) if "target" in raw else default.target,
            fov=float(raw.get("fov", default.fov)),
        )
