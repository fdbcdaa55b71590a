import logging
import os
import time
import uuid
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from themegen import generator, llm_client
from themegen.errors import ThemeError
from themegen.render import render_theme_css
from themegen.resolver import ThemeResolver
from themegen.store import get_store
from themegen.validators import collect_errors

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

log = logging.getLogger(__name__)

app = FastAPI(title="theme-generator")

allow_origins = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = uuid.uuid4().hex
    start = time.time()
    request.state.request_id = rid
    response = None
    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
    finally:
        dur_ms = int((time.time() - start) * 1000)
        log.info(
            "rid=%s method=%s path=%s status=%s dur_ms=%d",
            rid, request.method, request.url.path, getattr(response, "status_code", "?"), dur_ms,
        )


@app.exception_handler(ThemeError)
async def theme_error_handler(request: Request, exc: ThemeError):
    if exc.status_code >= 500:
        log.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


class GenerateRequest(BaseModel):
    prompt: str = Field("", description="Free-text description of the look to generate")


class InvertRequest(BaseModel):
    currentTheme: Dict[str, Any]


class ReviseRequest(BaseModel):
    currentTheme: Dict[str, Any]
    instruction: str = Field(..., description="What to change, e.g. 'warmer accent'")


class RenameRequest(BaseModel):
    themeName: str


class ValidateRequest(BaseModel):
    theme: Dict[str, Any]


_resolver: Optional[ThemeResolver] = None


def get_resolver() -> ThemeResolver:
    global _resolver
    if _resolver is None:
        _resolver = ThemeResolver(get_store())
    return _resolver


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/llm/status")
def llm_status_endpoint() -> Dict[str, Any]:
    return llm_client.status()


@app.post("/api/generate-theme")
def generate_theme_endpoint(req: GenerateRequest) -> Dict[str, Any]:
    prompt = req.prompt.strip()
    if not prompt:
        raise HTTPException(status_code=400, detail="prompt is required")
    return generator.generate_theme(prompt)


@app.post("/api/invert-theme")
def invert_theme_endpoint(req: InvertRequest) -> Dict[str, Any]:
    return generator.invert_theme(req.currentTheme)


@app.post("/api/revise-theme")
def revise_theme_endpoint(req: ReviseRequest) -> Dict[str, Any]:
    instruction = req.instruction.strip()
    if not instruction:
        raise HTTPException(status_code=400, detail="instruction is required")
    return generator.revise_theme(req.currentTheme, instruction)


@app.get("/api/themes")
def list_themes(resolver: ThemeResolver = Depends(get_resolver)) -> List[Dict[str, Any]]:
    return resolver.list_all()


@app.post("/api/themes", status_code=201)
def save_theme(theme: Dict[str, Any], resolver: ThemeResolver = Depends(get_resolver)) -> Dict[str, Any]:
    return resolver.save(theme)


@app.get("/api/themes/{theme_id}")
def get_theme(theme_id: str, resolver: ThemeResolver = Depends(get_resolver)) -> Dict[str, Any]:
    return resolver.get(theme_id)


@app.put("/api/themes/{theme_id}")
def overwrite_theme(
    theme_id: str, theme: Dict[str, Any], resolver: ThemeResolver = Depends(get_resolver)
) -> Dict[str, Any]:
    return resolver.overwrite(theme_id, theme)


@app.patch("/api/themes/{theme_id}")
def rename_theme(
    theme_id: str, req: RenameRequest, resolver: ThemeResolver = Depends(get_resolver)
) -> Dict[str, Any]:
    return resolver.rename(theme_id, req.themeName)


@app.delete("/api/themes/{theme_id}", status_code=204)
def delete_theme(theme_id: str, resolver: ThemeResolver = Depends(get_resolver)) -> Response:
    resolver.delete(theme_id)
    return Response(status_code=204)


@app.get("/api/themes/{theme_id}/css")
def theme_css(theme_id: str, resolver: ThemeResolver = Depends(get_resolver)) -> Response:
    css = render_theme_css(resolver.get(theme_id))
    return Response(content=css, media_type="text/css")


@app.post("/api/validate")
def validate_endpoint(req: ValidateRequest):
    """
    Check a theme against the JSON schema.
    Returns 200 and {"detail":{"valid":true}} on success,
            422 and {"detail":{"valid":false,"errors":[...]}} on failure.
    """
    errors = collect_errors(req.theme)
    detail: Dict[str, Any] = {"valid": not errors}
    if errors:
        detail["errors"] = errors
        return JSONResponse(status_code=422, content={"detail": detail})
    return {"detail": detail}
