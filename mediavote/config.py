"""Configuration settings for MediaVote."""

from pydantic import BaseModel
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # MongoDB settings
    mongodb_url: str = "mongodb://localhost:27017,localhost:27018,localhost:27019/?replicaSet=rs0"
    mongodb_database: str = "mediavote"

    # TMDB API settings
    tmdb_api_key: str = ""
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    auth_session_ttl_seconds: int = 60 * 60 * 24 * 30

    # Application settings
    app_name: str = "MediaVote"
    debug: bool = False

    # Deletion voting settings
    deletion_enabled: bool = True
    deletion_voting_duration_hours: int = 48
    deletion_required_vote_percentage: float = 60
    deletion_auto_delete_on_approval: bool = False
    deletion_allow_non_admin_requests: bool = True
    deletion_eager_resolution: bool = False

    # Background jobs
    scheduler_enabled: bool = True
    deletion_sweep_interval_seconds: int = 300
    badge_reconcile_interval_seconds: int = 60 * 60

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    def deletion(self) -> "DeletionSettings":
        """Read-only view of the deletion voting settings."""
        return DeletionSettings(
            enabled=self.deletion_enabled,
            voting_duration_hours=self.deletion_voting_duration_hours,
            required_vote_percentage=self.deletion_required_vote_percentage,
            auto_delete_on_approval=self.deletion_auto_delete_on_approval,
            allow_non_admin_requests=self.deletion_allow_non_admin_requests,
            eager_resolution=self.deletion_eager_resolution,
        )


class DeletionSettings(BaseModel):
    """Deletion voting configuration consumed at decision points."""
    enabled: bool = True
    voting_duration_hours: int = 48
    required_vote_percentage: float = 60
    auto_delete_on_approval: bool = False
    allow_non_admin_requests: bool = True
    eager_resolution: bool = False

    model_config = {"frozen": True}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
