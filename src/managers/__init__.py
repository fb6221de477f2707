"""
Managers for configuration and assets
"""

from .config_manager import ConfigManager
from .asset_manager import AssetManager

__all__ = ['ConfigManager', 'AssetManager']
