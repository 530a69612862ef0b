"""Configuration models for cave generation runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple
import uuid

import yaml

from ..core.errors import InvalidConfiguration
from ..core.rules import RuleSet

Color = Tuple[int, int, int]


def _expand_dir(path: Path) -> Path:
    return Path(path).expanduser().resolve()


def _default_run_id() -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"run-{timestamp}-{uuid.uuid4().hex[:8]}"


def _color(value: Any, name: str) -> Color:
    if isinstance(value, str):
        text = value.lstrip("#")
        if len(text) != 6:
            raise InvalidConfiguration(f"Color '{name}' must be '#rrggbb', got {value!r}")
        return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
    channels = tuple(int(channel) for channel in value)
    if len(channels) != 3 or any(not 0 <= channel <= 255 for channel in channels):
        raise InvalidConfiguration(f"Color '{name}' must have three channels in [0, 255], got {value!r}")
    return channels  # type: ignore[return-value]


@dataclass(frozen=True)
class RenderConfig:
    """How a grid maps to pixels."""

    cell_size: int = 4
    wall_color: Color = (0, 0, 0)
    passage_color: Color = (222, 222, 222)
    border_color: Optional[Color] = None

    def __post_init__(self) -> None:
        if self.cell_size <= 0:
            raise InvalidConfiguration(f"cell_size must be positive, got {self.cell_size}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "RenderConfig":
        if not mapping:
            return cls()
        border = mapping.get("border_color")
        return cls(
            cell_size=int(mapping.get("cell_size", cls.cell_size)),
            wall_color=_color(mapping.get("wall_color", cls.wall_color), "wall_color"),
            passage_color=_color(mapping.get("passage_color", cls.passage_color), "passage_color"),
            border_color=_color(border, "border_color") if border is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cell_size": self.cell_size,
            "wall_color": list(self.wall_color),
            "passage_color": list(self.passage_color),
            "border_color": list(self.border_color) if self.border_color else None,
        }


@dataclass
class CaveConfig:
    """Top-level configuration for a cave generation run."""

    width: int = 100
    height: int = 100
    wall_probability: float = 0.45
    generations: int = 5
    cull: bool = True
    min_passage_area: int = 0
    max_restarts: int = 10
    rng_seed: int = 0
    tick_interval_ms: int = 250
    rules: RuleSet = field(default_factory=RuleSet)
    render: RenderConfig = field(default_factory=RenderConfig)
    run_id: str = field(default_factory=_default_run_id)
    output_dir: Path = field(default_factory=lambda: Path("out"))
    log_dir: Path = field(default_factory=lambda: Path("out") / "logs")
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidConfiguration(f"Grid dimensions must be positive, got {self.width}x{self.height}")
        if self.generations < 0:
            raise InvalidConfiguration(f"generations must be non-negative, got {self.generations}")
        if self.max_restarts < 0:
            raise InvalidConfiguration(f"max_restarts must be non-negative, got {self.max_restarts}")
        if self.tick_interval_ms < 0:
            raise InvalidConfiguration(f"tick_interval_ms must be non-negative, got {self.tick_interval_ms}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "CaveConfig":
        rules = mapping.get("rules", {})
        render = mapping.get("render", {})
        for key, value in (("rules", rules), ("render", render)):
            if value is not None and not isinstance(value, Mapping):
                raise TypeError(f"'{key}' must be a mapping, got {type(value)!r}")

        output_dir = _expand_dir(Path(mapping.get("output_dir", "out")))
        log_dir = _expand_dir(Path(mapping.get("log_dir", output_dir / "logs")))

        extra = dict(mapping)
        for consumed in (
            "width",
            "height",
            "wall_probability",
            "generations",
            "cull",
            "min_passage_area",
            "max_restarts",
            "rng_seed",
            "tick_interval_ms",
            "rules",
            "render",
            "run_id",
            "output_dir",
            "log_dir",
        ):
            extra.pop(consumed, None)

        return cls(
            width=int(mapping.get("width", cls.width)),
            height=int(mapping.get("height", cls.height)),
            wall_probability=float(mapping.get("wall_probability", cls.wall_probability)),
            generations=int(mapping.get("generations", cls.generations)),
            cull=bool(mapping.get("cull", cls.cull)),
            min_passage_area=int(mapping.get("min_passage_area", cls.min_passage_area)),
            max_restarts=int(mapping.get("max_restarts", cls.max_restarts)),
            rng_seed=int(mapping.get("rng_seed", cls.rng_seed)),
            tick_interval_ms=int(mapping.get("tick_interval_ms", cls.tick_interval_ms)),
            rules=RuleSet.from_mapping(rules),
            render=RenderConfig.from_mapping(render),
            run_id=str(mapping.get("run_id") or _default_run_id()),
            output_dir=output_dir,
            log_dir=log_dir,
            extra=extra,
        )

    @classmethod
    def from_file(cls, path: Path | str) -> "CaveConfig":
        path = Path(path).expanduser()
        if not path.exists():
            raise FileNotFoundError(path)
        with path.open("r", encoding="utf8") as fh:
            if path.suffix.lower() in {".yml", ".yaml"}:
                data = yaml.safe_load(fh)
            else:
                data = json.load(fh)
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise TypeError(f"Configuration file must contain a mapping, got {type(data)!r}")
        return cls.from_mapping(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "wall_probability": self.wall_probability,
            "generations": self.generations,
            "cull": self.cull,
            "min_passage_area": self.min_passage_area,
            "max_restarts": self.max_restarts,
            "rng_seed": self.rng_seed,
            "tick_interval_ms": self.tick_interval_ms,
            "rules": self.rules.to_dict(),
            "render": self.render.to_dict(),
            "run_id": self.run_id,
        }

    def ensure_directories(self) -> None:
        """Create output directories if they do not exist."""
        for directory in (self.output_dir, self.log_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def run_output_dir(self) -> Path:
        return _expand_dir(self.output_dir / self.run_id)

    def run_frames_dir(self) -> Path:
        return _expand_dir(self.run_output_dir() / "frames")

    def run_log_path(self) -> Path:
        return _expand_dir(self.log_dir / f"{self.run_id}.jsonl")


def load_config(source: Path | str) -> CaveConfig:
    """Convenience helper for CLI consumers."""
    return CaveConfig.from_file(source)


__all__ = ["CaveConfig", "RenderConfig", "load_config"]
