from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

LogFormat = Literal["json", "console"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PR_CHECK_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default="console")

    # Working tree the output directories are resolved against.
    root: Path = Field(default=Path("."))

    archive_prefix: str = Field(default="amp")
    bucket: str = Field(default="gs://amp-travis-builds")
    key_file: Path = Field(default=Path("sa-travis-key.json"))
    encrypted_key_file: Path = Field(default=Path("build-system/sa-travis-key.json.enc"))
    key_digest: str = Field(default="sha256")
    project_id: str = Field(default="amp-travis-build-storage")
    service_account: str = Field(
        default="sa-travis@amp-travis-build-storage.iam.gserviceaccount.com"
    )

    decryption_secret: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("PR_CHECK_DECRYPTION_SECRET", "GCP_TOKEN"),
    )
    run_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PR_CHECK_RUN_ID", "TRAVIS_BUILD_NUMBER"),
    )
    event_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PR_CHECK_EVENT_TYPE", "TRAVIS_EVENT_TYPE"),
    )
    pull_request_sha: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "PR_CHECK_PULL_REQUEST_SHA", "TRAVIS_PULL_REQUEST_SHA"
        ),
    )
    fold_markers: bool = Field(
        default=False,
        validation_alias=AliasChoices("PR_CHECK_FOLD_MARKERS", "TRAVIS"),
    )
    force_color: bool = Field(default=False)

    trunk_branch: str = Field(default="master")

    sauce_username: str = Field(default="amphtml")
    sauce_token_url: str = Field(
        default="https://amphtml-sauce-token-dealer.appspot.com/getJwtToken"
    )
    sauce_start_script: str = Field(
        default="build-system/sauce_connect/start_sauce_connect.sh"
    )
    sauce_stop_script: str = Field(
        default="build-system/sauce_connect/stop_sauce_connect.sh"
    )

    deploy_bot_url: str = Field(default="https://amp-pr-deploy-bot.appspot.com")
    dist_host_base: str = Field(
        default="https://storage.googleapis.com/amp-test-website-1"
    )

    @property
    def is_pull_request(self) -> bool:
        return self.event_type == "pull_request"


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return Settings()
