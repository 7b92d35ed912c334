# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.build import PropertyNames
from .models.scm import Credentials

SHORT_REVISION_DISABLED = -1


class Settings(BaseSettings):
    """
    Central configuration for one resolution run.

    - Loads BUILDNUMBER_* variables and .env automatically (non-fatal if missing).
    - Tolerates the legacy maven-style names for the check/update flags via AliasChoices.
    """

    # Repository
    REPOSITORY_URL: Optional[str] = Field(default=None, description="Developer connection, e.g. scm:git:https://host/repo.git")
    READ_REPOSITORY_URL: Optional[str] = Field(default=None, description="Read-only connection, used when REPOSITORY_URL is blank")
    SCM_USERNAME: Optional[str] = None
    SCM_PASSWORD: Optional[str] = None
    WORKING_COPY_PATH: Path = Field(default_factory=Path.cwd)
    PROVIDER_IMPLEMENTATIONS: Dict[str, str] = Field(default_factory=dict)

    # Working-copy policy
    ENFORCE_CLEAN_CHECK: bool = Field(
        default=False, validation_alias=AliasChoices("BUILDNUMBER_ENFORCE_CLEAN_CHECK", "BUILDNUMBER_DO_CHECK")
    )
    SYNC_BEFORE_RESOLVE: bool = Field(
        default=False, validation_alias=AliasChoices("BUILDNUMBER_SYNC_BEFORE_RESOLVE", "BUILDNUMBER_DO_UPDATE")
    )
    OFFLINE: bool = False

    # Revision resolution
    USE_LAST_COMMITTED_REVISION: bool = False
    SHORT_REVISION_LENGTH: int = SHORT_REVISION_DISABLED
    REVISION_ON_SCM_FAILURE: Optional[str] = None
    RESOLVE_ONLY_ONCE: bool = False

    # Formatting
    BUILD_NUMBER_INCREMENT: int = 0
    FORMAT: Optional[str] = None
    ITEMS: List[str] = Field(default_factory=list)
    COUNTER_FILE: Path = Field(default_factory=lambda: Path.cwd() / "buildNumber.properties")
    LOCALE: Optional[str] = None
    TIMESTAMP_FORMAT: Optional[str] = None

    # Published property names
    BUILD_NUMBER_PROPERTY: str = "buildNumber"
    BUILD_ID_PROPERTY: str = "buildId"
    TIMESTAMP_PROPERTY: str = "timestamp"
    BRANCH_PROPERTY: str = "scmBranch"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Settings behavior
    model_config = SettingsConfigDict(
        env_prefix="BUILDNUMBER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Validators ------------------------------------------------------------

    @field_validator("REPOSITORY_URL", "READ_REPOSITORY_URL", "REVISION_ON_SCM_FAILURE", "FORMAT", "LOCALE", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        s = str(v).strip()
        return s or None

    @field_validator("WORKING_COPY_PATH", "COUNTER_FILE", mode="after")
    @classmethod
    def _expand(cls, v: Path) -> Path:
        return v.expanduser()

    # --- Derived views -----------------------------------------------------------

    @property
    def scm_location(self) -> Optional[str]:
        """Developer connection wins; the read-only connection is the fallback."""
        return self.REPOSITORY_URL or self.READ_REPOSITORY_URL

    @property
    def credentials(self) -> Credentials:
        return Credentials(username=self.SCM_USERNAME, password=self.SCM_PASSWORD)

    @property
    def property_names(self) -> PropertyNames:
        return PropertyNames(
            build_number=self.BUILD_NUMBER_PROPERTY,
            build_id=self.BUILD_ID_PROPERTY,
            timestamp=self.TIMESTAMP_PROPERTY,
            branch=self.BRANCH_PROPERTY,
        )
