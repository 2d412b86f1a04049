from fastapi import FastAPI, Request, BackgroundTasks, Header, HTTPException
import os
import json
import logging
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from relay.core.github.webhook import verify_webhook_signature, resolve_event_kind
from relay.core.router import EventRouter

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Review Relay")

@app.on_event("startup")
async def startup_event():
    """Report which integrations are configured (warn but don't fail)."""
    logger.info("Review Relay starting up...")

    if not os.getenv("BACKEND_URL"):
        logger.warning("BACKEND_URL not set - backend calls are disabled, no comments will be posted")
    if not os.getenv("GITHUB_WEBHOOK_SECRET"):
        logger.warning("GITHUB_WEBHOOK_SECRET not set - every webhook delivery will be rejected")
    if os.getenv("GITHUB_APP_ID"):
        logger.info("GitHub App authentication enabled")
    elif os.getenv("GITHUB_TOKEN"):
        logger.info("GitHub token authentication enabled")
    else:
        logger.warning("Neither GITHUB_APP_ID nor GITHUB_TOKEN set - GitHub calls will fail")

    logger.info("Review Relay ready!")

# Lazy so tests and config changes are picked up on first use
event_router = None

def get_event_router() -> EventRouter:
    global event_router
    if event_router is None:
        event_router = EventRouter()
    return event_router

@app.get("/")
@app.head("/")
def health_check():
    """Health check endpoint."""
    return {"status": "Review Relay is online"}

async def handle_event_background(event_name: str, delivery_id: Optional[str], payload: dict):
    """
    Background task that runs the event router.
    Runs after the webhook has already returned 200 OK.
    """
    logger.info(f"Background task started for delivery {delivery_id} ({event_name})")
    await get_event_router().dispatch(event_name, payload)

@app.post("/webhook/github")
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_hub_signature_256: Optional[str] = Header(None, alias="X-Hub-Signature-256"),
    x_github_event: Optional[str] = Header(None, alias="X-GitHub-Event"),
    x_github_delivery: Optional[str] = Header(None, alias="X-GitHub-Delivery"),
):
    """
    GitHub webhook endpoint for pull request review events.
    Validates signature and queues the matching handler.

    Returns 200 OK immediately to satisfy GitHub's 10s timeout requirement.
    """
    try:
        # Raw body is needed for signature verification
        body_bytes = await request.body()

        if not verify_webhook_signature(body_bytes, x_hub_signature_256):
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

        payload = json.loads(body_bytes.decode('utf-8'))
        action = payload.get("action")

        if resolve_event_kind(x_github_event, action) is None:
            return {"status": "ignored", "event": x_github_event, "action": action}

        logger.info(f"Webhook received: {x_github_event}.{action} (delivery {x_github_delivery})")

        background_tasks.add_task(
            handle_event_background,
            x_github_event,
            x_github_delivery,
            payload
        )

        return {
            "status": "accepted",
            "event": x_github_event,
            "action": action,
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error processing webhook: {e}", exc_info=True)
        # Still return 200 to prevent GitHub from retrying excessively
        return {"status": "error", "message": str(e)}

def run_server():
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))

if __name__ == "__main__":
    run_server()
