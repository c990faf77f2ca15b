"""Accounts API router."""

from fastapi import APIRouter, Depends

from model_tracker.dependencies import get_account_service
from model_tracker.schemas.portfolio import AccountListResponse
from model_tracker.services.portfolio import AccountPortfolioService

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("", response_model=AccountListResponse)
async def list_accounts(service: AccountPortfolioService = Depends(get_account_service)):
    """Distinct account names from the model mapping sheet."""
    accounts = await service.get_unique_accounts()
    return AccountListResponse(accounts=accounts, total=len(accounts))
