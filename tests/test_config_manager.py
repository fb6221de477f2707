"""Config loading (includes, fallback, typed values) and manifest loading"""

import textwrap
import pytest

from managers.asset_manager import AssetManager
from managers.config_manager import ConfigManager
from models.enums import ClosedBookPagePolicy, LaterPagesPolicy, LogLevel


def write(path, content):
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def config_dir(tmp_path):
    write(tmp_path / "viewer.yaml", """
        render_loop:
          fps: 500
          fixed_delta: null
        logging:
          level: debug
        api:
          port: 9000
    """)
    write(tmp_path / "cascade.yaml", """
        cascade:
          closed_book_pages: open_book
          later_pages_on_open: sideways
    """)
    write(tmp_path / "config.yaml", """
        include:
          - viewer.yaml
          - cascade.yaml
        model:
          path: book.yaml
    """)
    write(tmp_path / "defaults.yaml", """
        render_loop:
          fps: 30
    """)
    return tmp_path


def test_includes_are_merged_into_typed_config(config_dir):
    manager = ConfigManager(config_dir / "config.yaml", config_dir / "defaults.yaml")
    config = manager.load()

    assert config.render_loop.fps == 240
    assert config.render_loop.fixed_delta is None
    assert config.logging.level is LogLevel.DEBUG
    assert config.api.port == 9000
    assert config.cascade.closed_book_pages is ClosedBookPagePolicy.OPEN_BOOK
    assert config.cascade.later_pages_on_open is LaterPagesPolicy.AUTO_CLOSE
    assert manager.model_path == config_dir / "book.yaml"


def test_missing_config_falls_back_to_factory_defaults(config_dir):
    manager = ConfigManager(config_dir / "absent.yaml", config_dir / "defaults.yaml")
    config = manager.load()

    assert config.render_loop.fps == 30
    assert config.cascade.closed_book_pages is ClosedBookPagePolicy.REJECT
    assert manager.model_path is None


def test_shipped_config_loads():
    manager = ConfigManager()
    config = manager.load()

    assert manager.model_path is not None and manager.model_path.exists()
    assert config.cascade.later_pages_on_open is LaterPagesPolicy.AUTO_CLOSE

    scene = AssetManager().load_manifest(manager.model_path)
    assert "front_cover_open" in scene.clips_by_name()
    assert scene.missing_bindings() == []


def test_manifest_repairs_names_and_reports_missing_nodes():
    scene = AssetManager().load_data({
        "name": "draft",
        "nodes": ["latch", "page_1"],
        "clips": [
            {"name": "page_1_turn", "duration": 1.2, "tracks": ["page_1.quaternion"]},
            {"name": "page_1_turn", "duration": 1.2, "tracks": ["page_2.quaternion"]},
            {"name": "", "duration": 0.5, "tracks": ["latch.position"]},
            {"name": "broken", "duration": 0, "tracks": ["latch.position"]},
        ],
    })

    assert [c.name for c in scene.clips] == ["page_1_turn", "page_1_turn_2", "clip_2"]
    assert [(b.clip_name, b.node) for b in scene.missing_bindings()] == [("page_1_turn_2", "page_2")]
