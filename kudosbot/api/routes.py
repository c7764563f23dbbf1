"""
FastAPI routes for the Strava webhook, OAuth redirect, and Discord interactions.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import ValidationError

from kudosbot.clients.discord import InvalidSignatureError
from kudosbot.clients.strava_auth import OAuthTokenExchangeError
from kudosbot.dependencies import (
    get_activity_notifier,
    get_app_settings,
    get_command_handler,
    get_interaction_verifier,
    get_link_token_broker,
    get_strava_oauth_client,
    get_strava_token_service,
)
from kudosbot.schemas import Interaction, InteractionType, StravaWebhookEvent
from kudosbot.services.link_tokens import LinkTokenInvalidError

router = APIRouter()
logger = logging.getLogger(__name__)

EVENT_RECEIVED = "EVENT_RECEIVED"


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/webhook")
async def verify_webhook_subscription(
    settings: Annotated[Any, Depends(get_app_settings)],
    mode: str | None = Query(None, alias="hub.mode"),
    verify_token: str | None = Query(None, alias="hub.verify_token"),
    challenge: str | None = Query(None, alias="hub.challenge"),
) -> Response:
    """Answer Strava's push subscription handshake."""
    if not mode or not verify_token:
        logger.debug("Ignoring subscription handshake without mode or token")
        return Response(status_code=HTTPStatus.NO_CONTENT)

    if mode == "subscribe" and verify_token == settings.strava.verify_token:
        return JSONResponse(content={"hub.challenge": challenge})

    logger.info("Webhook verify token did not match")
    return Response(status_code=HTTPStatus.FORBIDDEN)


@router.post("/webhook")
async def receive_webhook_event(
    request: Request,
    notifier: Annotated[Any, Depends(get_activity_notifier)],
) -> PlainTextResponse:
    """Acknowledge every Strava event; relay newly created activities."""
    try:
        event = StravaWebhookEvent.model_validate(await request.json())
    except (ValidationError, ValueError) as exc:
        logger.warning("Ignoring malformed webhook event: %s", exc)
        return PlainTextResponse(EVENT_RECEIVED)

    if event.is_activity_create:
        try:
            await notifier.process_activity(str(event.owner_id), str(event.object_id))
        except Exception:
            logger.exception(
                "Failed to process activity %s for athlete %s",
                event.object_id,
                event.owner_id,
            )

    return PlainTextResponse(EVENT_RECEIVED)


@router.get("/authorize")
async def start_strava_oauth_flow(
    oauth_client: Annotated[Any, Depends(get_strava_oauth_client)],
    token: str = Query(..., description="One-time link token issued by /link."),
) -> RedirectResponse:
    """Send the browser to the Strava consent page carrying the link token."""
    return RedirectResponse(
        url=oauth_client.build_authorization_url(state=token),
        status_code=HTTPStatus.TEMPORARY_REDIRECT,
    )


@router.get("/callback")
async def handle_strava_oauth_callback(
    broker: Annotated[Any, Depends(get_link_token_broker)],
    token_service: Annotated[Any, Depends(get_strava_token_service)],
    notifier: Annotated[Any, Depends(get_activity_notifier)],
    code: str = Query(..., description="Authorization code returned by Strava."),
    state: str = Query(..., description="Link token passed through the consent page."),
) -> PlainTextResponse:
    """Complete the OAuth exchange and attach the athlete to the Discord user."""
    try:
        chat_user_id = broker.redeem(state)
    except LinkTokenInvalidError as exc:
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail="Invalid token"
        ) from exc

    try:
        result = await token_service.complete_link(code=code, chat_user_id=chat_user_id)
    except OAuthTokenExchangeError as exc:
        logger.error("Strava code exchange failed: %s", exc.body)
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Failed to exchange authorization code.",
        ) from exc

    if result.chat_user_id != chat_user_id:
        logger.info(
            "Athlete %s stays linked to %s; not announcing", result.athlete_id, result.chat_user_id
        )
        return PlainTextResponse("ok")

    try:
        await notifier.announce_link(
            athlete_id=result.athlete_id, chat_user_id=result.chat_user_id
        )
    except Exception:
        logger.exception("Failed to announce link for athlete %s", result.athlete_id)

    return PlainTextResponse("ok")


@router.post("/interactions")
async def discord_interactions(
    request: Request,
    verifier: Annotated[Any, Depends(get_interaction_verifier)],
    commands: Annotated[Any, Depends(get_command_handler)],
) -> dict:
    """Handle Discord interaction webhooks (PING and slash commands)."""
    body = await request.body()
    try:
        verifier.verify(
            signature=request.headers.get("x-signature-ed25519"),
            timestamp=request.headers.get("x-signature-timestamp"),
            body=body,
        )
    except InvalidSignatureError as exc:
        raise HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED, detail="invalid request signature"
        ) from exc

    try:
        interaction = Interaction.model_validate_json(body)
    except ValidationError as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail="Malformed interaction."
        ) from exc

    if interaction.type == InteractionType.PING:
        return {"type": 1}

    if interaction.type != InteractionType.APPLICATION_COMMAND or not interaction.data:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail="Unsupported interaction type."
        )

    user_id = interaction.invoking_user_id
    if not user_id:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail="Interaction has no invoking user."
        )

    return await commands.handle(
        name=interaction.data.name,
        chat_user_id=user_id,
        channel_id=interaction.channel_id,
    )


__all__ = ["router"]
