"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
Nested values use a double underscore, e.g. PROPCTL_SIMON__BLINK_DURATION=0.4.
All durations are in seconds.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import ConfigurationError


class ServerSettings(BaseModel):
    """Display WebSocket server settings shared by every prop."""

    host: str = "0.0.0.0"

    # Optional directory of browser assets served at "/"
    public_dir: Path | None = None


class RoomControllerSettings(BaseModel):
    """Room Controller connection settings."""

    # None disables the bridge entirely
    url: str | None = None

    # Reconnect backoff
    reconnect_initial: float = 2.0
    reconnect_max: float = 30.0
    reconnect_factor: float = 1.5

    # Periodic prop_update resync
    update_interval: float = 10.0

    # Upper bound for the offline announcement + close on shutdown
    close_timeout: float = 2.0


class SimonSettings(BaseModel):
    """Puzzle 1 - random-blink button grid."""

    http_port: int = 3004
    prop_id: str = "puzzle-1-simon"

    button_ids: list[int] = Field(default_factory=lambda: list(range(1, 11)))
    color: str = "white"

    blink_interval_min: float = 1.0
    blink_interval_max: float = 3.0
    blink_duration: float = 0.6
    wrong_flash_duration: float = 0.3

    @model_validator(mode="after")
    def _check_intervals(self) -> "SimonSettings":
        if self.blink_interval_min > self.blink_interval_max:
            raise ConfigurationError("blink_interval_min must not exceed blink_interval_max")
        if len(set(self.button_ids)) != len(self.button_ids):
            raise ConfigurationError("button ids must be unique")
        return self


class WorldMapSettings(BaseModel):
    """Puzzle 2 - encoder crosshair over the world map."""

    http_port: int = 3000
    prop_id: str = "puzzle-2-world-map"

    # Normalized 0-1 (0 = left/top edge)
    target_x: float = 0.63
    target_y: float = 0.41
    start_x: float = 0.15
    start_y: float = 0.75

    tolerance: float = 0.05
    hold_duration: float = 2.0
    hold_tick: float = 0.1

    # Encoder clicks from one edge to the other
    steps_x: int = 200
    steps_y: int = 150

    min_beep_interval: float = 0.1   # right on target
    max_beep_interval: float = 2.0   # maximum distance
    beep_frequency_hz: int = 800
    beep_duration_ms: int = 60

    # The map is live from boot
    auto_activate: bool = True


class Situation(BaseModel):
    """One Gadget Code situation: a clip and its secret code."""

    video: str
    correct_code: str


class GadgetClips(BaseModel):
    """Fixed Gadget Code clips."""

    intro: str = "intro.mp4"
    correct: str = "correct.mp4"
    wrong: str = "wrong.mp4"
    solved: str = "solved.mp4"
    idle: str = "idle.mp4"


class GadgetCodeSettings(BaseModel):
    """Puzzle 3 - keypad code entry over video situations."""

    http_port: int = 3001
    prop_id: str = "puzzle-3-gadget-code"

    situations: list[Situation] = Field(default_factory=lambda: [
        Situation(video="situation-1.mp4", correct_code="4729"),
        Situation(video="situation-2.mp4", correct_code="8153"),
        Situation(video="situation-3.mp4", correct_code="3946"),
    ])
    videos: GadgetClips = Field(default_factory=GadgetClips)
    code_length: int = 4

    @model_validator(mode="after")
    def _check_codes(self) -> "GadgetCodeSettings":
        if not self.situations:
            raise ConfigurationError("at least one situation is required")
        for situation in self.situations:
            code = situation.correct_code
            if len(code) != self.code_length or not code.isdigit():
                raise ConfigurationError(
                    f"code for {situation.video} must be {self.code_length} digits"
                )
        return self


class Vehicle(BaseModel):
    """A selectable vehicle and its lever code."""

    name: str
    video: str
    code: list[int]


class VehicleSettings(BaseModel):
    """Puzzle 4 - vehicle browser with lever code."""

    http_port: int = 3002
    prop_id: str = "puzzle-4-vehicle"

    vehicles: list[Vehicle] = Field(default_factory=lambda: [
        Vehicle(name="Stealth Helicopter", video="vehicle-1.mp4", code=[2, 7, 4, 5]),
        Vehicle(name="Armored SUV", video="vehicle-2.mp4", code=[4, 7, 8, 1]),
        Vehicle(name="Speedboat", video="vehicle-3.mp4", code=[2, 9, 4, 6]),
        Vehicle(name="Jet Fighter", video="vehicle-4.mp4", code=[8, 3, 2, 1]),
        Vehicle(name="Submarine", video="vehicle-5.mp4", code=[4, 3, 8, 5]),
    ])
    correct_vehicle_index: int = 2  # Speedboat

    lever_count: int = 4
    lever_positions: int = 10  # each lever goes 1-10

    feedback_delay: float = 2.0
    lever_poll_interval: float = 0.1

    @model_validator(mode="after")
    def _check_codes(self) -> "VehicleSettings":
        if not 0 <= self.correct_vehicle_index < len(self.vehicles):
            raise ConfigurationError("correct_vehicle_index is out of range")
        for vehicle in self.vehicles:
            if len(vehicle.code) != self.lever_count:
                raise ConfigurationError(f"{vehicle.name}: code needs {self.lever_count} positions")
            if any(not 1 <= p <= self.lever_positions for p in vehicle.code):
                raise ConfigurationError(f"{vehicle.name}: code position out of range")
        return self


class City(BaseModel):
    """Missile path waypoint (SVG coordinates)."""

    name: str
    x: float
    y: float


def _default_path() -> list[City]:
    cities = [
        ("Los Angeles", 130.6, 405.6),
        ("New York", 218.3, 389.2),
        ("Mexico", 170.6, 446.0),
        ("Lima", 232.3, 530.0),
        ("Rio de Janeiro", 303.7, 562.8),
        ("Le Cap", 479.7, 630.0),
        ("Dakar", 367.3, 470.0),
        ("Casablanca", 389.0, 431.6),
        ("Madrid", 402.6, 425.3),
        ("Paris", 405.4, 402.7),
        ("Berlin", 427.6, 394.0),
        ("Moscou", 496.1, 357.8),
        ("Pékin", 675.0, 410.4),
        ("Singapour", 675.0, 500.0),
        ("Jakarta", 706.4, 530.0),
        ("Nouméa", 785.0, 590.0),
        ("Sydney", 760.4, 629.3),
    ]
    return [City(name=n, x=x, y=y) for n, x, y in cities]


class MissileSettings(BaseModel):
    """Puzzle 5 - reverse the missile path with the joystick."""

    http_port: int = 3003
    prop_id: str = "puzzle-5-missile"

    # Villain origin first, target last
    path: list[City] = Field(default_factory=_default_path)

    # Forward direction of each leg path[i] -> path[i+1]
    directions: list[str] = Field(default_factory=lambda: [
        "e", "sw", "se", "se", "e", "nw", "ne", "ne",
        "n", "e", "ne", "e", "s", "se", "se", "sw",
    ])

    forward_anim_duration: float = 8.0
    leg_anim_duration: float = 0.8
    leg_settle: float = 0.2

    input_time_limit: float = 4.0
    timer_tick: float = 0.1

    # Accept a cardinal that matches either half of an expected diagonal
    lenient_diagonals: bool = True

    @model_validator(mode="after")
    def _check_legs(self) -> "MissileSettings":
        if len(self.path) < 2:
            raise ConfigurationError("missile path needs at least two cities")
        if len(self.directions) != len(self.path) - 1:
            raise ConfigurationError("directions must have one entry per leg")
        valid = {"n", "ne", "e", "se", "s", "sw", "w", "nw"}
        unknown = [d for d in self.directions if d not in valid]
        if unknown:
            raise ConfigurationError(f"unknown directions: {unknown}")
        return self


class VillainScreenSettings(BaseModel):
    http_port: int = 3010
    prop_id: str = "screen-villain"
    videos: dict[str, str] = Field(default_factory=lambda: {
        "intro": "villain-intro.mp4",
        "idle": "villain-idle.mp4",
    })


class ImmersionScreenSettings(BaseModel):
    http_port: int = 3011
    prop_id: str = "screen-immersion"


class RightScreenSettings(BaseModel):
    http_port: int = 3012
    prop_id: str = "screen-right"
    videos: dict[str, str] = Field(default_factory=lambda: {
        "idle": "tim-ferris-idle.mp4",
        "intro": "tim-ferris-intro.mp4",
        "escape1": "tim-ferris-escape-1.mp4",
        "escape2": "tim-ferris-escape-2.mp4",
        "rescued": "tim-ferris-rescued.mp4",
    })
    puzzle3_url: str = "ws://localhost:3001"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PROPCTL_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = False

    server: ServerSettings = Field(default_factory=ServerSettings)
    room_controller: RoomControllerSettings = Field(default_factory=RoomControllerSettings)

    simon: SimonSettings = Field(default_factory=SimonSettings)
    world_map: WorldMapSettings = Field(default_factory=WorldMapSettings)
    gadget_code: GadgetCodeSettings = Field(default_factory=GadgetCodeSettings)
    vehicle: VehicleSettings = Field(default_factory=VehicleSettings)
    missile: MissileSettings = Field(default_factory=MissileSettings)

    screen_villain: VillainScreenSettings = Field(default_factory=VillainScreenSettings)
    screen_right: RightScreenSettings = Field(default_factory=RightScreenSettings)
    screen_immersion: ImmersionScreenSettings = Field(default_factory=ImmersionScreenSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
