"""Typed shapes of platform responses and local cf CLI state."""

from pydantic import BaseModel, ConfigDict, Field


class AppSearchResponse(BaseModel):
    """Paged /v2/apps search result; only the count is consumed."""

    total_results: int


class V2ApiError(BaseModel):
    """Error envelope returned by v2 endpoints."""

    code: int
    description: str
    error_code: str


class V3ApiErrorItem(BaseModel):
    code: int
    detail: str = ""
    title: str = ""


class V3ApiError(BaseModel):
    """Error envelope returned by v3 endpoints."""

    errors: list[V3ApiErrorItem] = Field(min_length=1)


class SpaceFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    guid: str = Field("", alias="GUID")
    name: str = Field("", alias="Name")


class CFCliConfig(BaseModel):
    """The parts of the cf CLI's config.json this tool reads."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    space_fields: SpaceFields = Field(default_factory=SpaceFields, alias="SpaceFields")
