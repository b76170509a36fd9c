# bufcycle/core/Features.py
"""Named host features that can be switched on and off at runtime."""

import logging
from typing import Iterator, Optional


class HostFeature:
    """A toggleable host feature such as spell checking."""

    def __init__(self, name: str, enabled: bool = True, description: str = "") -> None:
        self.name = name
        self.description = description
        self._enabled = enabled

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        if not self._enabled:
            logging.debug("Feature %r enabled.", self.name)
        self._enabled = True

    def disable(self) -> None:
        if self._enabled:
            logging.debug("Feature %r disabled.", self.name)
        self._enabled = False

    def toggle(self) -> bool:
        if self._enabled:
            self.disable()
        else:
            self.enable()
        return self._enabled

    def __repr__(self) -> str:
        return f"<HostFeature {self.name} {'on' if self._enabled else 'off'}>"


class FeatureRegistry:
    """Lookup of host features by name."""

    def __init__(self) -> None:
        self._features: dict[str, HostFeature] = {}

    def register(self, feature: HostFeature) -> HostFeature:
        self._features[feature.name] = feature
        return feature

    def get(self, name: str) -> Optional[HostFeature]:
        return self._features.get(name)

    def is_enabled(self, name: str) -> bool:
        feature = self._features.get(name)
        return bool(feature and feature.is_enabled)

    def enabled_names(self) -> list[str]:
        return [name for name, feature in self._features.items() if feature.is_enabled]

    def __contains__(self, name: object) -> bool:
        return name in self._features

    def __iter__(self) -> Iterator[HostFeature]:
        return iter(self._features.values())
