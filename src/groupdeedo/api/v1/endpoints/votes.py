"""Vote endpoint for the Groupdeedo API."""

import logging

from fastapi import APIRouter, HTTPException, status

from groupdeedo.api.v1.dependencies import HubDep
from groupdeedo.core.errors import PostNotFoundError, StoreError
from groupdeedo.schemas.vote import VoteCreate, VoteResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vote", tags=["votes"])


@router.post("/{post_id}", response_model=VoteResponse, response_model_by_alias=True)
async def cast_vote(post_id: str, vote_data: VoteCreate, hub: HubDep) -> VoteResponse:
    """Cast, flip or withdraw a vote and broadcast the new tallies."""
    try:
        return await hub.cast_vote(vote_data.session_id, post_id, vote_data.vote_type)
    except PostNotFoundError as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found",
        ) from err
    except StoreError as err:
        logger.exception("Error recording vote on %s", post_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to vote",
        ) from err
