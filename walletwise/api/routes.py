"""API routes for payments, transactions, search and the assistant."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel, Field

from walletwise.api.deps import (
    get_assistant,
    get_deep_link_hub,
    get_payment_service,
    get_search,
    get_transaction_store,
)
from walletwise.assistant.service import SUGGESTIONS, FinanceAssistant
from walletwise.exceptions import ErrorCode, UpiError
from walletwise.llm.models import Message, Role
from walletwise.logging_config import get_logger
from walletwise.payments.models import PendingPayment
from walletwise.payments.service import PaymentService
from walletwise.search.models import ScoredTransaction
from walletwise.search.searcher import LocalTransactionSearch
from walletwise.transactions.models import CategoryTotal, MonthlyTotal, Transaction
from walletwise.transactions.store import TransactionStore
from walletwise.upi.deeplink import DeepLinkHub
from walletwise.upi.links import build_payment_url, parse_qr, validate_address
from walletwise.upi.models import ParsedUpiQr, UpiPaymentRequest

logger = get_logger(__name__)

INVALID_QR_MESSAGE = "Invalid QR code, please try again"

router = APIRouter(prefix="/api/v1")

PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]
StoreDep = Annotated[TransactionStore, Depends(get_transaction_store)]
SearchDep = Annotated[LocalTransactionSearch, Depends(get_search)]
AssistantDep = Annotated[FinanceAssistant, Depends(get_assistant)]
HubDep = Annotated[DeepLinkHub, Depends(get_deep_link_hub)]


class QrParseRequest(BaseModel):
    """Raw text decoded from a QR code."""

    payload: str = Field(description="Decoded QR payload")


class AddressValidationRequest(BaseModel):
    """Candidate UPI address."""

    address: str = Field(description="Candidate VPA")


class AddressValidationResponse(BaseModel):
    """Result of a VPA check."""

    address: str
    valid: bool


class PaymentUrlResponse(BaseModel):
    """A constructed UPI payment URL."""

    url: str


class PaymentCreateRequest(UpiPaymentRequest):
    """Payment to dispatch, plus the category to record it under."""

    category: str | None = Field(default=None, description="Spending category")


class ConfirmationRequest(BaseModel):
    """User's answer to "did the payment go through?"."""

    succeeded: bool = Field(description="Whether the payment went through")


class CallbackResponse(BaseModel):
    """Deep link delivery report."""

    delivered: int = Field(description="Listeners that received the URL")


class SearchRequest(BaseModel):
    """Free-text transaction search."""

    query: str = Field(min_length=1, description="Search text")
    threshold: float | None = Field(
        default=None,
        ge=-1.0,
        le=1.0,
        description="Minimum similarity",
    )
    limit: int | None = Field(default=None, ge=1, le=50, description="Maximum results")


class SearchHit(Transaction):
    """Transaction matched by a search, without its vector."""

    similarity: float


class ChatRequest(BaseModel):
    """Conversation so far; the last message is the user's question."""

    messages: list[Message] = Field(min_length=1, description="Conversation turns")


class ChatResponse(BaseModel):
    """Assistant reply."""

    reply: str


class AnalysisResponse(BaseModel):
    """Assistant insight report."""

    analysis: str


# --- UPI links ---


@router.post("/upi/parse", response_model=ParsedUpiQr, tags=["UPI"])
async def parse_qr_endpoint(body: QrParseRequest) -> ParsedUpiQr:
    """Decode a scanned UPI QR payload."""
    parsed = parse_qr(body.payload)
    if parsed is None:
        raise UpiError(INVALID_QR_MESSAGE, code=ErrorCode.UPI_PARSE_ERROR)
    return parsed


@router.post("/upi/validate", response_model=AddressValidationResponse, tags=["UPI"])
async def validate_address_endpoint(body: AddressValidationRequest) -> AddressValidationResponse:
    """Check a UPI address against the VPA pattern."""
    return AddressValidationResponse(address=body.address, valid=validate_address(body.address))


@router.post("/upi/url", response_model=PaymentUrlResponse, tags=["UPI"])
async def payment_url_endpoint(body: UpiPaymentRequest) -> PaymentUrlResponse:
    """Build the `upi://pay` URL for a request."""
    return PaymentUrlResponse(url=build_payment_url(body))


@router.get("/upi/callback", response_model=CallbackResponse, tags=["UPI"])
async def deep_link_callback(request: Request, hub: HubDep) -> CallbackResponse:
    """Entry point for payment apps returning to WalletWise."""
    url = str(request.url)
    logger.info("Deep link received", extra={"path": request.url.path})
    return CallbackResponse(delivered=hub.publish(url))


# --- Payments ---


@router.post(
    "/payments",
    response_model=PendingPayment,
    status_code=status.HTTP_201_CREATED,
    tags=["Payments"],
)
async def create_payment(body: PaymentCreateRequest, service: PaymentServiceDep) -> PendingPayment:
    """Hand a payment to the UPI app and await confirmation."""
    request = UpiPaymentRequest.model_validate(body.model_dump(exclude={"category"}))
    return await service.initiate(request, category=body.category)


@router.get("/payments/{payment_id}", response_model=PendingPayment, tags=["Payments"])
async def get_payment(payment_id: str, service: PaymentServiceDep) -> PendingPayment:
    """Current state of a payment."""
    return service.get(payment_id)


@router.post("/payments/{payment_id}/confirm", response_model=PendingPayment, tags=["Payments"])
async def confirm_payment(
    payment_id: str,
    body: ConfirmationRequest,
    service: PaymentServiceDep,
) -> PendingPayment:
    """Record the user's confirmation; saves the transaction on yes."""
    return await service.confirm(payment_id, body.succeeded)


# --- Transactions ---


@router.get("/transactions", response_model=list[Transaction], tags=["Transactions"])
async def list_transactions(
    store: StoreDep,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
) -> list[Transaction]:
    """Most recent transactions, newest first."""
    return [Transaction.model_validate(tx.model_dump()) for tx in await store.get_transactions(limit)]


@router.get(
    "/transactions/categories",
    response_model=list[CategoryTotal],
    tags=["Transactions"],
)
async def category_totals(
    store: StoreDep,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[CategoryTotal]:
    """Spend per category; restricted to a period when both bounds are given."""
    if start is not None and end is not None:
        return await store.get_category_spending_by_period(start, end)
    return await store.get_transactions_by_category()


@router.get("/transactions/monthly", response_model=list[MonthlyTotal], tags=["Transactions"])
async def monthly_totals(store: StoreDep) -> list[MonthlyTotal]:
    """Spend per month, oldest first."""
    return await store.get_monthly_spending()


# --- Search ---


@router.post("/search", response_model=list[SearchHit], tags=["Search"])
async def search_transactions(
    body: SearchRequest,
    store: StoreDep,
    search: SearchDep,
) -> list[SearchHit]:
    """Semantic search over recent transactions."""
    transactions = await store.get_transactions()
    results: list[ScoredTransaction] = await search.search_transactions_locally(
        body.query,
        transactions,
        threshold=body.threshold,
        limit=body.limit,
    )
    return [SearchHit.model_validate(r.model_dump()) for r in results]


# --- Assistant ---


@router.get("/assistant/suggestions", response_model=list[str], tags=["Assistant"])
async def suggestions() -> list[str]:
    """Canned starter questions."""
    return SUGGESTIONS


@router.post("/assistant/chat", response_model=ChatResponse, tags=["Assistant"])
async def chat(body: ChatRequest, assistant: AssistantDep) -> ChatResponse:
    """Answer the latest question using the user's spending data."""
    history = [m for m in body.messages if m.role in (Role.USER, Role.ASSISTANT)]
    transaction_data = await assistant.load_transaction_data()
    reply = await assistant.get_ai_response(history, transaction_data)
    return ChatResponse(reply=reply)


@router.post("/assistant/analyze", response_model=AnalysisResponse, tags=["Assistant"])
async def analyze(store: StoreDep, assistant: AssistantDep) -> AnalysisResponse:
    """Insight report over recent transactions."""
    transactions = await store.get_transactions()
    analysis = await assistant.analyze_transactions(transactions)
    return AnalysisResponse(analysis=analysis)
