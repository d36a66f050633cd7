"""Main entry point for the persona chat proxy API."""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import PORT, LOG_LEVEL, LOG_FORMAT, CORS_ORIGINS
from logger import setup_logging
from models.api import ChatResponse, ErrorResponse
from models.proxy import ProxyResult, ProxySuccess
from services.chat_proxy import ProxyService

if LOG_FORMAT.lower() == "json":
    setup_logging(LOG_LEVEL)

# Initialize logging
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Persona Chat Proxy",
    description="Answers visitor questions about the site owner without exposing the upstream API key",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
proxy_service: ProxyService = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global proxy_service
    
    logger.info("Initializing persona chat proxy...")
    proxy_service = ProxyService()
    logger.info(f"Initialized ProxyService (model={proxy_service.model})")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Persona Chat Proxy API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "persona-chat-proxy",
        "version": "1.0.0",
        "credential_configured": bool(proxy_service and proxy_service.is_configured)
    }


@app.api_route("/api/chat", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def chat_endpoint(request: Request) -> JSONResponse:
    """
    Forward one visitor message to the upstream model with the persona prompt.
    
    Accepts ``{"message": string}`` by POST. Replies ``{"response": string}``
    with 200, or ``{"error": string, "kind": string, "code": string|null}``
    with the failure's status (400, 401, 405, 429 or 500, or another
    upstream status passed through).
    """
    result = await proxy_service.handle(request.method, request.json)
    return to_json_response(result)


def to_json_response(result: ProxyResult) -> JSONResponse:
    """Serialize a ProxyResult into the endpoint's JSON contract."""
    if isinstance(result, ProxySuccess):
        return JSONResponse(
            status_code=result.http_status,
            content=ChatResponse(response=result.text).model_dump()
        )
    
    body = ErrorResponse(
        error=result.detail,
        kind=result.kind.value,
        code=result.code,
        upstream_message=result.upstream_message
    )
    return JSONResponse(status_code=result.http_status, content=body.model_dump(exclude_none=True))


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Persona Chat Proxy API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
