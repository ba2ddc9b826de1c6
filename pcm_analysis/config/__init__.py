"""Configuration for PCM analysis."""

from pcm_analysis.config.settings import Settings, get_settings, reset_settings

__all__ = ['Settings', 'get_settings', 'reset_settings']
