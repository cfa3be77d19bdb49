"""Platform operations implemented on top of the cf CLI."""

import json
import os
from pathlib import Path
from typing import Any, TypeVar
from urllib.parse import quote

import yaml
from pydantic import BaseModel, ValidationError

from ..core.cf_cli import CFCli
from ..core.exceptions import (
    AppNotFoundError,
    CFCommandError,
    ConfigurationError,
    MalformedResponseError,
    RemoteOperationError,
)
from ..models.job import Job
from ..models.responses import AppSearchResponse, CFCliConfig, V2ApiError, V3ApiError
from .operations import PlatformOperations

ModelT = TypeVar("ModelT", bound=BaseModel)


class CloudFoundryOperations(PlatformOperations):
    """Runs each operation as a cf CLI command in the currently targeted space."""

    def __init__(self, cli: CFCli | None = None):
        super().__init__()
        self.cli = cli or CFCli()

    async def create_descriptor(self, app_name: str, manifest_path: Path) -> None:
        await self.cli.run("create-app-manifest", app_name, "-p", str(manifest_path))
        self._validate_manifest(app_name, manifest_path)

    async def deploy(
        self, app_name: str, manifest_path: Path, content_path: Path, start: bool = False
    ) -> None:
        args = ["push", app_name, "-f", str(manifest_path), "-p", str(content_path)]
        if not start:
            args.append("--no-start")
        await self.cli.run(*args)

    async def rename(self, old_name: str, new_name: str) -> None:
        await self.cli.run("rename", old_name, new_name)

    async def restart(self, app_name: str) -> None:
        await self.cli.run("restart", app_name)

    async def restage(self, app_name: str) -> None:
        await self.cli.run("restage", app_name)

    async def delete(self, app_name: str) -> None:
        await self.cli.run("delete", app_name, "-f")

    async def resolve_identity(self, app_name: str) -> str:
        result = await self.cli.run("app", app_name, "--guid", check=False)
        if not result.success:
            if "not found" in result.error_message.lower():
                raise AppNotFoundError(app_name)
            raise CFCommandError(
                f"cf app failed with exit code {result.returncode}: {result.error_message}"
            )
        if not result.lines:
            raise AppNotFoundError(app_name)
        return result.lines[0].strip()

    async def copy_artifact(self, source_id: str, dest_id: str) -> Job:
        payload = await self._curl(
            f"/v2/apps/{dest_id}/copy_bits",
            "-X",
            "POST",
            "-d",
            json.dumps({"source_app_guid": source_id}),
        )
        return self._parse(Job, payload, "copy_bits")

    async def fetch_job(self, job_id: str) -> Job:
        payload = await self._curl(f"/v2/jobs/{job_id}")
        return self._parse(Job, payload, "job")

    async def reassign_stack(self, app_id: str, stack_name: str) -> None:
        body = {"lifecycle": {"type": "buildpack", "data": {"stack": stack_name}}}
        await self._curl(f"/v3/apps/{app_id}", "-X", "PATCH", "-d", json.dumps(body))

    async def count_matching(self, app_name: str, space_id: str) -> int:
        path = f"/v2/apps?q=name:{quote(app_name, safe='')}&q=space_guid:{space_id}"
        payload = await self._curl(path)
        return self._parse(AppSearchResponse, payload, "app search").total_results

    async def current_space_id(self) -> str:
        config_path = self._cf_config_path()
        try:
            raw = json.loads(config_path.read_text(encoding="utf-8"))
            config = CFCliConfig.model_validate(raw)
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"cf CLI config not found at {config_path}; run 'cf login' first"
            ) from e
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise ConfigurationError(f"Unable to read cf CLI config {config_path}: {e}") from e

        if not config.space_fields.guid:
            raise ConfigurationError("No space targeted; run 'cf target -s SPACE' first")
        return config.space_fields.guid

    def _cf_config_path(self) -> Path:
        cf_home = self.cli.cf_home or os.getenv("CF_HOME") or str(Path.home())
        return Path(cf_home) / ".cf" / "config.json"

    async def _curl(self, path: str, *args: str) -> dict[str, Any]:
        """Issue an API request through cf curl and decode the JSON body."""
        result = await self.cli.run("curl", path, *args)
        body = result.stdout.strip()
        if not body:
            return {}

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Response from {path} is not JSON: {e}") from e

        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"Response from {path} is a {type(payload).__name__}, expected an object"
            )

        self._raise_for_api_error(path, payload)
        return payload

    def _raise_for_api_error(self, path: str, payload: dict[str, Any]) -> None:
        if "error_code" in payload:
            error = self._parse(V2ApiError, payload, "error")
            raise RemoteOperationError(
                f"{path} failed: {error.error_code}, {error.description} [code: {error.code}]",
                code=error.code,
                description=error.description,
                error_code=error.error_code,
            )
        if "errors" in payload:
            first = self._parse(V3ApiError, payload, "error").errors[0]
            raise RemoteOperationError(
                f"{path} failed: {first.title}, {first.detail} [code: {first.code}]",
                code=first.code,
                description=first.detail,
                error_code=first.title,
            )

    def _parse(self, model: type[ModelT], payload: dict[str, Any], what: str) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected {what} response: {e}") from e

    def _validate_manifest(self, app_name: str, manifest_path: Path) -> None:
        """Check the exported manifest describes app_name."""
        try:
            manifest = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise MalformedResponseError(f"Unable to read exported manifest: {e}") from e

        applications = manifest.get("applications") if isinstance(manifest, dict) else None
        if not isinstance(applications, list) or not any(
            isinstance(app, dict) and app.get("name") == app_name for app in applications
        ):
            raise MalformedResponseError(
                f"Exported manifest {manifest_path} has no application named {app_name!r}"
            )
