"""Run configuration read from environment-style values."""

import json
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from openapi_docgen.errors import ConfigError

DEFAULT_SOURCE_URL = "https://api.apifox.com/api/v1/projects/7484041/http-apis"
DEFAULT_DEFINITIONS_FILE = Path("openapi/NewAPI.apifox.json")
DEFAULT_OUTPUT_ROOT = Path("openapi/generated")
DEFAULT_CONTENT_ROOT = Path("content/docs")
DEFAULT_LOCALES = ("en", "ja")
DEFAULT_TIMEOUT = 30.0


class Settings(BaseModel):
    """Where to read endpoints and definitions from and where to write documents."""

    model_config = ConfigDict(frozen=True)

    source_url: str = DEFAULT_SOURCE_URL
    source_headers: dict[str, str] | None = None
    timeout: float = DEFAULT_TIMEOUT
    definitions_file: Path = DEFAULT_DEFINITIONS_FILE
    output_root: Path = DEFAULT_OUTPUT_ROOT
    content_root: Path = DEFAULT_CONTENT_ROOT
    locales: tuple[str, ...] = DEFAULT_LOCALES

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from HTTP_SOURCE_URL, APIFOX_PROJECT_FILE, OPENAPI_OUT_DIR etc.

        Blank values are treated as unset.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        values: dict = {}
        if url := get("HTTP_SOURCE_URL"):
            values["source_url"] = url
        if headers := get("HTTP_SOURCE_HEADERS"):
            values["source_headers"] = parse_headers(headers)
        if timeout := get("HTTP_SOURCE_TIMEOUT"):
            try:
                values["timeout"] = float(timeout)
            except ValueError:
                raise ConfigError(f"HTTP_SOURCE_TIMEOUT is not a number: {timeout!r}")
        if definitions := get("APIFOX_PROJECT_FILE"):
            values["definitions_file"] = Path(definitions)
        if output := get("OPENAPI_OUT_DIR"):
            values["output_root"] = Path(output)
        if content := get("DOCS_CONTENT_DIR"):
            values["content_root"] = Path(content)
        if locales := get("DOCS_LOCALES"):
            values["locales"] = tuple(l.strip() for l in locales.split(",") if l.strip())
        return cls(**values)


def parse_headers(raw: str) -> dict[str, str]:
    """Decode a JSON object of request headers, e.g. '{"Authorization": "Bearer x"}'."""
    try:
        headers = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"HTTP_SOURCE_HEADERS is not valid JSON: {e.msg}")
    if not isinstance(headers, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in headers.items()
    ):
        raise ConfigError("HTTP_SOURCE_HEADERS must be a JSON object of string values")
    return headers
