"""
FastAPI Application - REST API for a quiz front end.

Endpoints:
    GET    /api/v1/health                          Health check
    GET    /api/v1/modes                           Available play modes
    POST   /api/v1/banks                           Upload a CSV question bank
    POST   /api/v1/banks/sample                    Load the bundled demo bank
    GET    /api/v1/banks/{id}                      Bank info
    POST   /api/v1/playthroughs                    Start a playthrough
    GET    /api/v1/playthroughs                    List active playthroughs
    GET    /api/v1/playthroughs/{id}               Current quiz screen state
    POST   /api/v1/playthroughs/{id}/answer        Answer the current question
    POST   /api/v1/playthroughs/{id}/tick          Forward countdown time
    POST   /api/v1/playthroughs/{id}/next          Move to the next question
    POST   /api/v1/playthroughs/{id}/reset         Play the same bank again
    GET    /api/v1/playthroughs/{id}/review        Review answers
    DELETE /api/v1/playthroughs/{id}               End a playthrough

Countdown Flow:
    The front end owns the clock and POSTs /tick once a second. The tick
    that runs out the time resolves the question as unanswered. Ticks
    after that, or after an answer, change nothing.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Union
import os

from .. import __version__

# Environment configuration
MYQUIZ_ENV = os.getenv("MYQUIZ_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# HTTP status per error code
ERROR_STATUS = {
    "NO_VALID_QUESTIONS": 422,
    "BANK_UNREADABLE": 400,
    "BANK_NOT_FOUND": 404,
    "PLAYTHROUGH_NOT_FOUND": 404,
    "INVALID_ACTION": 409,
    "VALIDATION_ERROR": 400,
}


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional QuizService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, UploadFile, File, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn python-multipart"
        )

    from .service import QuizService
    from .schemas import (
        # Request models
        CreatePlaythroughRequest,
        AnswerRequest,
        TickRequest,
        # Response models
        BankResponse,
        PlaythroughResponse,
        TurnResponse,
        ReviewResponse,
        ErrorResponse,
        ModeListResponse,
        PlaythroughListResponse,
        EndPlaythroughResponse,
        HealthResponse,
        ErrorCode,
    )

    app = FastAPI(
        title="MyQuiz API",
        description="""
Multiple-choice quiz engine with five play modes.

## Flow

1. `POST /banks` with a CSV (`id,kategori,pertanyaan,pilihan_a..pilihan_d,jawaban`)
2. `POST /playthroughs` with the `bank_id`, a mode and its settings
3. Loop: `POST /answer` (or `/tick` in countdown mode), then `POST /next`
4. When `loop_state` is `finished`, `GET /review`

## Error Codes

| Code | Description |
|------|-------------|
| `NO_VALID_QUESTIONS` | CSV read, but no row is a valid question |
| `BANK_UNREADABLE` | Upload is not a readable CSV |
| `BANK_NOT_FOUND` | Bank ID not found |
| `PLAYTHROUGH_NOT_FOUND` | Playthrough does not exist |
| `INVALID_ACTION` | Action not allowed in the current state |
| `VALIDATION_ERROR` | Upload is not a .csv file |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    quiz_service = service or QuizService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def error_json(error: ErrorResponse) -> JSONResponse:
        """Render an ErrorResponse with the status for its code."""
        code = ErrorCode(error.error_code).value
        return JSONResponse(
            status_code=ERROR_STATUS.get(code, 400),
            content=error.model_dump(mode="json"),
        )

    def respond(response):
        if isinstance(response, ErrorResponse):
            return error_json(response)
        return response

    errors = {
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    }

    # =========================================================================
    # Meta
    # =========================================================================

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["Meta"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="myquiz", version=__version__)

    @app.get("/api/v1/modes", response_model=ModeListResponse, tags=["Meta"])
    async def list_modes() -> ModeListResponse:
        """List the play modes and what they do."""
        return ModeListResponse(modes=quiz_service.list_modes())

    # =========================================================================
    # Bank Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/banks",
        response_model=BankResponse,
        responses={**errors, 422: {"model": ErrorResponse}},
        tags=["Banks"],
        summary="Upload a CSV question bank",
    )
    async def upload_bank(
        file: Annotated[UploadFile, File(description="CSV file with the question set")],
    ) -> Union[BankResponse, JSONResponse]:
        """
        Validate, shuffle and store a question bank.

        Rows without a question or with `jawaban` outside A-D are skipped.
        If nothing is left the upload fails with `NO_VALID_QUESTIONS`.
        """
        data = await file.read()
        return respond(quiz_service.load_bank(data, source_name=file.filename))

    @app.post(
        "/api/v1/banks/sample",
        response_model=BankResponse,
        tags=["Banks"],
        summary="Load the bundled demo bank",
    )
    async def load_sample_bank() -> BankResponse:
        return quiz_service.load_sample_bank()

    @app.get(
        "/api/v1/banks/{bank_id}",
        response_model=BankResponse,
        responses=errors,
        tags=["Banks"],
    )
    async def get_bank(bank_id: str) -> Union[BankResponse, JSONResponse]:
        return respond(quiz_service.get_bank(bank_id))

    # =========================================================================
    # Playthrough Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/playthroughs",
        response_model=PlaythroughResponse,
        responses=errors,
        tags=["Playthroughs"],
        summary="Start a playthrough",
    )
    async def create_playthrough(
        request: CreatePlaythroughRequest,
    ) -> Union[PlaythroughResponse, JSONResponse]:
        return respond(quiz_service.create_playthrough(request))

    @app.get(
        "/api/v1/playthroughs",
        response_model=PlaythroughListResponse,
        tags=["Playthroughs"],
    )
    async def list_playthroughs() -> PlaythroughListResponse:
        playthroughs = quiz_service.list_playthroughs()
        return PlaythroughListResponse(playthroughs=playthroughs, count=len(playthroughs))

    @app.get(
        "/api/v1/playthroughs/{playthrough_id}",
        response_model=PlaythroughResponse,
        responses=errors,
        tags=["Playthroughs"],
    )
    async def get_playthrough(playthrough_id: str) -> Union[PlaythroughResponse, JSONResponse]:
        return respond(quiz_service.get_playthrough(playthrough_id))

    @app.delete(
        "/api/v1/playthroughs/{playthrough_id}",
        response_model=EndPlaythroughResponse,
        tags=["Playthroughs"],
    )
    async def end_playthrough(
        playthrough_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndPlaythroughResponse:
        success = quiz_service.end_playthrough(playthrough_id, reason)
        return EndPlaythroughResponse(success=success, playthrough_id=playthrough_id)

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/playthroughs/{playthrough_id}/answer",
        response_model=TurnResponse,
        responses={**errors, 409: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Answer the current question",
    )
    async def answer(
        playthrough_id: str,
        request: AnswerRequest,
    ) -> Union[TurnResponse, JSONResponse]:
        """Answering an already-resolved question returns `ignored=true`."""
        return respond(quiz_service.answer(playthrough_id, request))

    @app.post(
        "/api/v1/playthroughs/{playthrough_id}/tick",
        response_model=TurnResponse,
        responses={**errors, 409: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Forward countdown time",
    )
    async def tick(
        playthrough_id: str,
        request: TickRequest,
    ) -> Union[TurnResponse, JSONResponse]:
        return respond(quiz_service.tick(playthrough_id, request))

    @app.post(
        "/api/v1/playthroughs/{playthrough_id}/next",
        response_model=TurnResponse,
        responses={**errors, 409: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Move to the next question",
    )
    async def next_question(playthrough_id: str) -> Union[TurnResponse, JSONResponse]:
        """
        Fails with `INVALID_ACTION` if the current question is unanswered.
        When the playthrough ends, `terminal_reason` is set.
        """
        return respond(quiz_service.next(playthrough_id))

    @app.post(
        "/api/v1/playthroughs/{playthrough_id}/reset",
        response_model=PlaythroughResponse,
        responses=errors,
        tags=["Game Loop"],
        summary="Play the same bank again",
    )
    async def reset(playthrough_id: str) -> Union[PlaythroughResponse, JSONResponse]:
        return respond(quiz_service.reset(playthrough_id))

    @app.get(
        "/api/v1/playthroughs/{playthrough_id}/review",
        response_model=ReviewResponse,
        responses=errors,
        tags=["Game Loop"],
        summary="Review answers",
    )
    async def review(playthrough_id: str) -> Union[ReviewResponse, JSONResponse]:
        return respond(quiz_service.review(playthrough_id))

    return app
