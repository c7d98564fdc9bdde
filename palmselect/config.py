"""
Configuration management for the dwell-selection gesture system.
"""
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass

from .errors import ConfigError


STABILITY_STRATEGIES = ("duration", "majority")


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: int
    width: int
    height: int
    fps: int


@dataclass
class MediaPipeConfig:
    """MediaPipe hand landmarker configuration settings."""
    model_path: str
    num_hands: int
    min_detection_confidence: float
    min_tracking_confidence: float


@dataclass
class ClassifierConfig:
    """Finger-count classifier settings."""
    thumb_distance_threshold: float
    closed_fist_short_circuit: bool


@dataclass
class StabilityConfig:
    """Stability filter strategy and its parameters."""
    strategy: str
    stable_time_ms: int
    history_size: int
    stable_threshold: int


@dataclass
class InteractionConfig:
    """Dwell durations and tick cadence, all in milliseconds."""
    wake_duration_ms: int
    select_duration_ms: int
    confirm_duration_ms: int
    grace_period_ms: int
    tick_interval_ms: int
    out_of_frame_invalid: bool
    out_of_frame_margin: float


@dataclass
class DisplayConfig:
    """Display configuration settings."""
    show_landmarks: bool
    mirror: bool
    window_name: str


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str


@dataclass
class Cfg:
    """Main configuration class."""
    camera: CameraConfig
    mediapipe: MediaPipeConfig
    classifier: ClassifierConfig
    stability: StabilityConfig
    interaction: InteractionConfig
    display: DisplayConfig
    logging: LoggingConfig


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.
    
    Args:
        path: Path to config file. If None, uses the packaged config.default.yaml
        
    Returns:
        Configuration object with all settings
    """
    if path is None:
        path = Path(__file__).parent / "config.default.yaml"
    
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)
    
    return _dict_to_config(data)


def _dict_to_config(data: Dict[str, Any]) -> Cfg:
    """Convert dictionary to configuration object."""
    try:
        camera_data = data['camera']
        camera = CameraConfig(
            index=camera_data['index'],
            width=camera_data['width'],
            height=camera_data['height'],
            fps=camera_data['fps']
        )
        
        mp_data = data['mediapipe']
        mediapipe = MediaPipeConfig(
            model_path=mp_data['model_path'],
            num_hands=mp_data['num_hands'],
            min_detection_confidence=mp_data['min_detection_confidence'],
            min_tracking_confidence=mp_data['min_tracking_confidence']
        )
        
        classifier_data = data['classifier']
        classifier = ClassifierConfig(
            thumb_distance_threshold=float(classifier_data['thumb_distance_threshold']),
            closed_fist_short_circuit=bool(classifier_data['closed_fist_short_circuit'])
        )
        
        stability_data = data['stability']
        stability = StabilityConfig(
            strategy=stability_data['strategy'],
            stable_time_ms=int(stability_data['stable_time_ms']),
            history_size=int(stability_data['history_size']),
            stable_threshold=int(stability_data['stable_threshold'])
        )
        
        interaction_data = data['interaction']
        interaction = InteractionConfig(
            wake_duration_ms=int(interaction_data['wake_duration_ms']),
            select_duration_ms=int(interaction_data['select_duration_ms']),
            confirm_duration_ms=int(interaction_data['confirm_duration_ms']),
            grace_period_ms=int(interaction_data['grace_period_ms']),
            tick_interval_ms=int(interaction_data['tick_interval_ms']),
            out_of_frame_invalid=bool(interaction_data['out_of_frame_invalid']),
            out_of_frame_margin=float(interaction_data.get('out_of_frame_margin', 0.05))
        )
        
        display_data = data['display']
        display = DisplayConfig(
            show_landmarks=display_data['show_landmarks'],
            mirror=display_data['mirror'],
            window_name=display_data['window_name']
        )
        
        logging_cfg = LoggingConfig(level=str(data['logging']['level']).upper())
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Missing or malformed config entry: {e}") from e
    
    _validate_stability(stability)
    _validate_interaction(interaction)
    
    return Cfg(
        camera=camera,
        mediapipe=mediapipe,
        classifier=classifier,
        stability=stability,
        interaction=interaction,
        display=display,
        logging=logging_cfg
    )


def _validate_stability(stability: StabilityConfig) -> None:
    if stability.strategy not in STABILITY_STRATEGIES:
        raise ConfigError(
            f"Unknown stability strategy '{stability.strategy}', "
            f"expected one of {', '.join(STABILITY_STRATEGIES)}"
        )
    if stability.stable_time_ms < 0:
        raise ConfigError("stability.stable_time_ms must be >= 0")
    if stability.history_size < 1:
        raise ConfigError("stability.history_size must be >= 1")
    if not 1 <= stability.stable_threshold <= stability.history_size:
        raise ConfigError(
            f"stability.stable_threshold must be between 1 and history_size "
            f"({stability.history_size}), got {stability.stable_threshold}"
        )


def _validate_interaction(interaction: InteractionConfig) -> None:
    for name in ("wake_duration_ms", "select_duration_ms", "confirm_duration_ms", "tick_interval_ms"):
        if getattr(interaction, name) <= 0:
            raise ConfigError(f"interaction.{name} must be > 0")
    if interaction.grace_period_ms < 0:
        raise ConfigError("interaction.grace_period_ms must be >= 0")
    if interaction.out_of_frame_margin < 0:
        raise ConfigError("interaction.out_of_frame_margin must be >= 0")
