from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request, Response

from recnorm.api.middleware import RequestContextMiddleware
from recnorm.api.models import ApiError, FieldOut, HealthOut, RecordSummaryOut
from recnorm.core.config import NormalizerConfig, env_int
from recnorm.core.errors import (
    MalformedDocumentError,
    NormalizationDepthError,
    NumericCoercionError,
    SchemaError,
)
from recnorm.core.normalization import Normalizer, dumps
from recnorm.core.schema.reflection import record_schema
from recnorm.core.schema.registry import RecordRegistry

log = logging.getLogger("recnorm.api")


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Configuration for the API service.

    - max_body_bytes: request bodies above this size are rejected with 413.
    - records: registry entries, "name=module:Attr;..." (used when no registry
      is passed to create_app).

    """

    max_body_bytes: int = 1024 * 1024
    records: str = ""

    @staticmethod
    def from_env() -> "ServiceConfig":
        return ServiceConfig(
            max_body_bytes=env_int("RECNORM_MAX_BODY_BYTES", 1024 * 1024),
            records=os.environ.get("RECNORM_RECORDS", "").strip(),
        )


def _error(status_code: int, error: str, detail: Optional[str] = None, path: Optional[str] = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=ApiError(error=error, detail=detail, path=path).model_dump(),
    )


def create_app(
    registry: Optional[RecordRegistry] = None,
    *,
    config: Optional[NormalizerConfig] = None,
    service_config: Optional[ServiceConfig] = None,
) -> FastAPI:
    """Create the FastAPI app.

    Records are looked up by name in the registry; when none is given the
    registry is built from RECNORM_RECORDS.
    """

    cfg = service_config or ServiceConfig.from_env()
    reg = registry if registry is not None else RecordRegistry.from_spec(cfg.records)
    normalizer = Normalizer(config=config or NormalizerConfig.from_env())

    log.setLevel(os.environ.get("RECNORM_LOG_LEVEL", "INFO").upper())

    app = FastAPI(title="recnorm API", version="0.1")

    app.state.cfg = cfg
    app.state.registry = reg
    app.state.normalizer = normalizer

    app.add_middleware(RequestContextMiddleware)

    @app.get("/health", response_model=HealthOut)
    def health() -> HealthOut:
        return HealthOut(ok=True, records=len(reg.list_names()))

    @app.get("/records", response_model=List[RecordSummaryOut])
    def list_records() -> List[RecordSummaryOut]:
        """List registered record names with their field layout."""

        out: List[RecordSummaryOut] = []
        for name in reg.list_names():
            record_type = type(reg.get(name))
            specs = record_schema(record_type, normalizer.config)
            out.append(
                RecordSummaryOut(
                    name=name,
                    record_type=record_type.__qualname__,
                    fields=[
                        FieldOut(
                            identifier=s.identifier,
                            kind=s.kind.value,
                            primary_name=s.primary_name,
                            secondary_name=s.secondary_name,
                            numeric_type=s.numeric_type.__name__ if s.numeric_type else None,
                        )
                        for s in specs
                    ],
                )
            )
        return out

    @app.post("/normalize/{record_name}")
    async def normalize_endpoint(record_name: str, request: Request, sort_keys: bool = False) -> Response:
        """Normalize a raw JSON body against a registered record.

        Errors
        - 404 unknown record
        - 413 body larger than max_body_bytes
        - 400 body is not valid JSON
        - 422 numeric field holds a non-numeric string
        - 500 record schema cannot be normalized

        """

        request.state.record_name = record_name

        declared_len = request.headers.get("content-length", "").strip()
        if declared_len.isdigit() and int(declared_len) > cfg.max_body_bytes:
            raise _error(413, "body_too_large")
        body = await request.body()
        if len(body) > cfg.max_body_bytes:
            raise _error(413, "body_too_large")

        record = reg.try_get(record_name)
        if record is None:
            raise _error(404, "record_not_found", detail=record_name)

        try:
            out = normalizer.normalize(record, body)
        except MalformedDocumentError as e:
            raise _error(400, "malformed_document", detail=str(e))
        except NumericCoercionError as e:
            raise _error(422, "numeric_coercion_failed", detail=str(e), path=e.path)
        except (SchemaError, NormalizationDepthError) as e:
            log.error("schema_error", extra={"record_name": record_name, "error": str(e)})
            raise _error(500, "schema_error", detail=str(e))

        return Response(content=dumps(out, sort_keys=sort_keys), media_type="application/json")

    return app
