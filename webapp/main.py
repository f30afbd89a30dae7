from __future__ import annotations

import logging
import os
from typing import Dict, List

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from mini_analyzer import AnalysisEngine
from webapp.report import build_report
from webapp.schemas import AnalysisReport, AnalyzeRequest

logger = logging.getLogger(__name__)


def _cors_origins() -> List[str]:
	raw = os.getenv("CORS_ORIGINS", "*")
	return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]


app = FastAPI(title="Mini Analyzer", version="1.0.0")

app.add_middleware(
	CORSMiddleware,
	allow_origins=_cors_origins(),
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
	response = await call_next(request)
	logger.info("%s %s -> %d", request.method, request.url.path, response.status_code)
	return response


@app.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
	return HTMLResponse(
		"<h2>Mini Analyzer API</h2><p>POST <code>/api/analyze</code> with JSON: <code>{\"source\": \"int a = 10;\"}</code></p>"
	)


@app.get("/health")
def health() -> Dict[str, str]:
	return {"status": "ok"}


@app.post("/api/analyze", response_model=AnalysisReport)
def analyze_source(req: AnalyzeRequest) -> AnalysisReport:
	engine = AnalysisEngine()
	art = engine.analyze(req.source)
	logger.debug("analyzed %d characters: %d errors", len(req.source), len(art.diagnostics))
	return build_report(art)


def run() -> None:
	logging.basicConfig(
		level=os.getenv("LOG_LEVEL", "INFO").upper(),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	host = os.getenv("HOST", "0.0.0.0")
	port = int(os.getenv("PORT", "8080"))
	logger.info("Mini Analyzer listening on http://%s:%d", host, port)
	uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
	run()
