from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from adaptation.policy import decide, validate_request
from backend.app.db import ensure_db, summarize_decisions, write_decision
from config.settings import load_backend_config

settings = load_backend_config()
app = FastAPI(title="Color Tap Decision API", version="0.1.0")


@app.on_event("startup")
def _startup() -> None:
    ensure_db(settings.db_path)


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.post("/decision")
def decision(body: dict[str, Any]) -> JSONResponse:
    try:
        req = validate_request(body)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    # То же правило, что и локальный fallback в игре.
    result = decide(req)
    write_decision(settings.db_path, req.level.value, req.correct, result)
    return JSONResponse(content=result.to_wire(), status_code=200)


@app.get("/v1/decisions/summary")
def decisions_summary(limit: int = 1000) -> dict[str, Any]:
    safe_limit = max(1, min(settings.summary_limit_max, int(limit)))
    summary = summarize_decisions(settings.db_path, limit=safe_limit)
    return {"ok": True, "limit": safe_limit, **summary}


def main() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
