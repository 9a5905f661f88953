"""Environment-driven settings. Entry points call load_dotenv() before reading them."""

import os
from dataclasses import dataclass
from pathlib import Path

_ROOT = Path(__file__).parent.parent.parent


@dataclass(frozen=True)
class Settings:
    resources_dir: Path = _ROOT / "resources"
    stars_file: str = "stars.ecliptic.json"
    constellations_file: str = "constellations.zodiac.json"
    ephemeris: str = "mean"  # "mean" or "skyfield"
    ephemeris_file: str = "de421.bsp"
    default_lat: float = 60.17  # Helsinki
    default_lng: float = 24.94

    @property
    def stars_path(self) -> Path:
        return self.resources_dir / self.stars_file

    @property
    def constellations_path(self) -> Path:
        return self.resources_dir / self.constellations_file

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ZODIACSKY_* environment variables, falling back to defaults."""
        defaults = cls()
        return cls(
            resources_dir=Path(
                os.environ.get("ZODIACSKY_RESOURCES", str(defaults.resources_dir))
            ),
            stars_file=os.environ.get("ZODIACSKY_STARS_FILE", defaults.stars_file),
            constellations_file=os.environ.get(
                "ZODIACSKY_CONSTELLATIONS_FILE", defaults.constellations_file
            ),
            ephemeris=os.environ.get("ZODIACSKY_EPHEMERIS", defaults.ephemeris).lower(),
            ephemeris_file=os.environ.get(
                "ZODIACSKY_EPHEMERIS_FILE", defaults.ephemeris_file
            ),
            default_lat=float(os.environ.get("ZODIACSKY_LAT", defaults.default_lat)),
            default_lng=float(os.environ.get("ZODIACSKY_LNG", defaults.default_lng)),
        )
