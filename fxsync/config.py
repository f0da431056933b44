from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils import parse_csv_ints

DEFAULT_LEAGUE_IDS = (
    "39,40,41,42,43,44,61,62,63,71,72,78,79,80,88,89,94,95,98,99,"
    "103,104,106,107,110,111,113,114,119,120,128,129,135,136,140,141,"
    "144,145,164,169,170,172,173,179,180,183,184,188,197,200,203,204,"
    "207,208,210,211,218,219,233,239,240,244,245,250,253,254,258,261,"
    "262,265,268,271,280,281,283,284,286,287,318,319,328,332,333,344,"
    "345,355,357,358,361,364,373,392,393,407,408"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    api_football_key: str = Field("")
    api_football_base_url: str = Field("https://v3.football.api-sports.io")
    database_url: str = Field("sqlite:///data/fxsync.sqlite")
    sync_timezone: str = Field("Europe/London")
    league_source: str = Field("static")  # static | catalog
    league_ids: str = Field(DEFAULT_LEAGUE_IDS)
    preferred_bookmaker_ids: str = Field("6,3,1")  # bet365, Pinnacle, William Hill
    request_delay_ms: int = Field(180, ge=0)
    request_timeout: int = Field(30, gt=0)
    window_days: int = Field(7, ge=0)
    fallback_next_count: int = Field(50, gt=0)
    run_deadline_seconds: int = Field(3600, ge=0)
    preflight_check: bool = Field(True)
    log_level: str = Field("INFO")


def league_ids_from_settings(settings: Settings) -> list[int]:
    """
    Parse comma-separated league IDs into a list of ints.
    """
    return parse_csv_ints(settings.league_ids)


def bookmaker_ids_from_settings(settings: Settings) -> list[int]:
    return parse_csv_ints(settings.preferred_bookmaker_ids)


settings = Settings()
