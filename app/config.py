from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.layout.radial import RadialLayoutConfig
from domain.models import (
    CENTER_NODE_ID,
    DEFAULT_HISTORY_SIZE,
    LayoutOptions,
    Size,
    ViewMode,
)

DEFAULT_CONFIG_PATH = Path("config/workspace.yaml")


class ViewportSettings(BaseModel):
    width: float = Field(default=1600.0, ge=0)
    height: float = Field(default=1000.0, ge=0)


class LayoutSettings(BaseModel):
    center_node_id: str = CENTER_NODE_ID
    view_mode: ViewMode = ViewMode.RADIAL
    padding: float = Field(default=12.0, ge=0)
    max_passes: int = Field(default=10, ge=1)
    viewport: ViewportSettings | None = ViewportSettings()
    base_radius: float = 420.0
    ring_spacing: float = 280.0
    min_radius: float = 260.0
    min_ring_spacing: float = 220.0
    fill_ratio: float = Field(default=0.82, gt=0, le=1)
    arc_gap: float = Field(default=48.0, ge=0)

    @field_validator("view_mode", mode="before")
    @classmethod
    def normalize_view_mode(cls, value: object) -> object:
        if isinstance(value, ViewMode):
            return value
        return str(value).strip().lower() if value else ViewMode.RADIAL.value

    def to_layout_config(self) -> RadialLayoutConfig:
        return RadialLayoutConfig(
            base_radius=self.base_radius,
            ring_spacing=self.ring_spacing,
            min_radius=self.min_radius,
            min_ring_spacing=self.min_ring_spacing,
            fill_ratio=self.fill_ratio,
            arc_gap=self.arc_gap,
        )

    def to_layout_options(self) -> LayoutOptions:
        viewport = (
            Size(self.viewport.width, self.viewport.height) if self.viewport is not None else None
        )
        return LayoutOptions(
            center_node_id=self.center_node_id,
            view_mode=self.view_mode,
            viewport=viewport,
            padding=self.padding,
        )


class HistorySettings(BaseModel):
    max_size: int = Field(default=DEFAULT_HISTORY_SIZE, ge=1)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RWS_", env_nested_delimiter="__")

    layout: LayoutSettings = LayoutSettings()
    history: HistorySettings = HistorySettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("RWS_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
