"""Config subpackage - settings and catalog paths."""
from .settings import Settings, get_settings

__all__ = ['Settings', 'get_settings']
