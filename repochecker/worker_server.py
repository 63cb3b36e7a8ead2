"""HTTP server receiving GitHub webhook deliveries.

Endpoints:
  - GET /
  - GET /health
  - POST /api/github/webhooks
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import HTMLResponse

from repochecker.config import AppSettings
from repochecker.core.startup_validation import validate_all
from repochecker.domain.analysis_pipeline import AnalysisPipeline
from repochecker.domain.file_sampler import FileSampler, SamplingPolicy
from repochecker.domain.issue_publisher import IssuePublisher
from repochecker.domain.models import PipelineResult
from repochecker.domain.suggestion_generator import SuggestionGenerator
from repochecker.integrations.github.app_auth import GitHubClientFactory
from repochecker.integrations.webhooks.github_events import (
    AnalysisRequest,
    WebhookPayloadError,
    decide_trigger,
    verify_signature,
)
from repochecker.providers.base import SuggestionProvider
from repochecker.providers.gemini import GeminiProvider, GeminiProviderConfig
from repochecker.providers.noop import NoOpProvider
from repochecker.rendering.issue_template import IssueBodyRenderer, get_default_template_dir

WEBHOOK_PATH = "/api/github/webhooks"

_STATUS_PAGE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>RepoChecker</title>
  </head>
  <body>
    <h1>RepoChecker</h1>
    <p>RepoChecker is running. It reviews new repositories and pushes to the default
    branch with Gemini and files the suggestions as an issue.</p>
    <p>Webhook endpoint: <code>{webhook_path}</code></p>
  </body>
</html>
"""


class WebhookRuntime:
    """Background runtime that runs accepted analyses off the event loop."""

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        settings: AppSettings,
        provider: SuggestionProvider | None = None,
        client_factory: GitHubClientFactory | None = None,
        template_dir: str | None = None,
    ) -> None:
        self._settings = settings
        self._stopping = False
        self._queue: asyncio.Queue[AnalysisRequest] = asyncio.Queue()
        self._consumer_task: asyncio.Task[None] | None = None

        self._client_factory = client_factory or GitHubClientFactory(settings=settings)
        self._pipeline = AnalysisPipeline(
            sampler=FileSampler(policy=SamplingPolicy.from_settings(settings)),
            generator=SuggestionGenerator(
                provider=provider or self._build_provider(),
                max_content_chars=settings.max_content_chars,
            ),
            publisher=IssuePublisher(
                body_renderer=IssueBodyRenderer(
                    template_dir=template_dir or get_default_template_dir()
                ),
                project_url=settings.project_url,
            ),
        )

    async def start(self) -> None:
        """Starts background consumer."""

        if self._consumer_task is None:
            self._consumer_task = asyncio.create_task(self._consume())

    async def stop(self) -> None:
        """Requests stop and cancels consumer."""

        self._stopping = True
        if self._consumer_task is not None:
            self._consumer_task.cancel()
            try:
                await self._consumer_task
            except asyncio.CancelledError:
                pass
            self._consumer_task = None

    async def enqueue(self, *, request: AnalysisRequest) -> int:
        """Enqueues an accepted delivery and returns the queue size."""

        await self._queue.put(request)
        return self._queue.qsize()

    def run_blocking(self, request: AnalysisRequest) -> PipelineResult:
        """Runs one analysis with a client scoped to the delivery's installation."""

        github_client = self._client_factory.create_client(
            installation_id=request.installation_id
        )
        try:
            return self._pipeline.run(repository=request.repository, github_client=github_client)
        finally:
            github_client.close()

    async def _consume(self) -> None:
        while not self._stopping:
            request = await self._queue.get()
            try:
                await self._process(request)
            finally:
                self._queue.task_done()

    async def _process(self, request: AnalysisRequest) -> None:
        try:
            await asyncio.to_thread(self.run_blocking, request)
        except Exception as exc:  # noqa: BLE001
            self._logger.exception(
                "Error analyzing repository %s: event=%s error=%s",
                request.repository.full_name,
                request.event,
                exc,
            )

    def _build_provider(self) -> SuggestionProvider:
        if self._settings.gemini_api_key is None:
            return NoOpProvider(message="Gemini is not configured (set GEMINI_API_KEY).")
        return GeminiProvider(
            config=GeminiProviderConfig(
                api_key=self._settings.gemini_api_key,
                model=self._settings.gemini_model,
                timeout_seconds=self._settings.model_timeout_seconds,
            )
        )


def create_app(
    *,
    settings: AppSettings | None = None,
    runtime: WebhookRuntime | None = None,
) -> FastAPI:
    """Creates FastAPI app."""

    settings = settings or AppSettings()
    logging.basicConfig(level=settings.log_level.upper())
    validate_all(settings=settings)
    runtime = runtime or WebhookRuntime(settings=settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await runtime.start()
        logging.getLogger(__name__).info("RepoChecker GitHub App started!")
        try:
            yield
        finally:
            await runtime.stop()

    app = FastAPI(title="RepoChecker", lifespan=lifespan)
    app.state.runtime = runtime

    @app.get("/", response_class=HTMLResponse)
    async def status_page() -> str:
        return _STATUS_PAGE.format(webhook_path=WEBHOOK_PATH)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(WEBHOOK_PATH, status_code=202)
    async def webhooks(
        request: Request,
        x_github_event: str | None = Header(default=None),
        x_github_delivery: str | None = Header(default=None),
        x_hub_signature_256: str | None = Header(default=None),
    ) -> dict[str, object]:
        body = await request.body()
        if settings.webhook_secret is not None and not verify_signature(
            secret=settings.webhook_secret, body=body, signature_header=x_hub_signature_256
        ):
            logging.warning("Rejected webhook delivery: delivery=%s", x_github_delivery)
            raise HTTPException(status_code=401, detail="Invalid signature.")
        if x_github_event is None:
            raise HTTPException(status_code=400, detail="Missing X-GitHub-Event header.")
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise HTTPException(status_code=400, detail="Invalid JSON payload.") from exc
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Payload must be a JSON object.")

        if x_github_event == "ping":
            return {"accepted": False, "reason": "pong"}
        try:
            decision = decide_trigger(event=x_github_event, payload=payload)
        except WebhookPayloadError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        logging.info(
            "webhook received: event=%s delivery=%s accepted=%s reason=%s",
            x_github_event,
            x_github_delivery,
            decision.accepted,
            decision.reason,
        )
        if decision.accepted and decision.request is not None:
            await runtime.enqueue(request=decision.request)
        return {"accepted": decision.accepted, "reason": decision.reason}

    return app


async def _serve() -> None:
    settings = AppSettings()
    app = create_app(settings=settings)
    config = uvicorn.Config(
        app, host=settings.listen_host, port=settings.port, log_level=settings.log_level.lower()
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Entry point used by the console script."""

    asyncio.run(_serve())


if __name__ == "__main__":
    main()
