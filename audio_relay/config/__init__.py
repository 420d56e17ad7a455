"""Configuration constants (env names and defaults only).

Values are resolved from the environment in `audio_relay.runtime.settings_loader`.
"""

__all__: list[str] = []
