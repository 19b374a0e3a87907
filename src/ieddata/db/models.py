"""Records read from an app engine platform box database.

App is projected dynamically (see projector.py) because its source tables
keep changing; DeviceEntry maps a stable two-column table and is read through
the ORM.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import Column, String
from sqlmodel import Field, SQLModel

from ieddata.db.projector import ZERO_TIME


def _column(name: str, default: object = "") -> object:
    """Field stored under an explicit column name."""
    return field(default=default, metadata={"db": name})


@dataclass(frozen=True, slots=True)
class App:
    """An installed IE app, including version information.

    One row of the "application" and "applicationversions" tables joined on
    appId. Field names follow their column names, except for a few renamed
    for readability (url, icon_path, company_url, created, modified) and the
    app-prefixed identifiers.
    """

    id: str = _column("appId")  # type: ignore[assignment]
    version: str = _column("appVersion")  # type: ignore[assignment]
    version_id: str = _column("appVersionId")  # type: ignore[assignment]
    version_status: int = 0
    release_notes: str = ""
    owner_id: str = _column("appOwnerId")  # type: ignore[assignment]
    user_id: str = ""
    project_id: str = ""
    title: str = ""
    repository_name: str = ""
    description: str = ""
    url: str = _column("webAddress")  # type: ignore[assignment]
    icon_path: str = _column("icon")  # type: ignore[assignment]
    app_status: int = 0
    company_name: str = ""
    company_url: str = _column("companyWebAddress")  # type: ignore[assignment]
    is_developer_app_install: int = 0
    is_visible: int = 0
    sort_weight: int = 0
    run_as_service: bool = _column("runasservice", False)  # type: ignore[assignment]
    is_updated_on_portal: int = 0
    created: datetime = _column("createdDate", ZERO_TIME)  # type: ignore[assignment]
    modified: datetime = _column("modifiedDate", ZERO_TIME)  # type: ignore[assignment]
    composer_file_path: str = _column("composerFilePath")  # type: ignore[assignment]
    redirect_type: str = ""
    redirect_url: str = ""
    rest_redirect_url: str = _column("restRedirectUrl")  # type: ignore[assignment]
    redirect_section: str = ""
    to_execute_order: str = ""
    metadata: str = ""
    service_labels: str = ""
    is_secure: int = 0
    is_swarm_mode_enable: int = 0
    is_debugging_enabled: int = 0


class DeviceEntry(SQLModel, table=True):
    """One key/value row of the "device" table."""

    __tablename__ = "device"

    device_key: str = Field(sa_column=Column("deviceKey", String, primary_key=True))
    device_value: str | None = Field(default=None, sa_column=Column("deviceValue", String))
