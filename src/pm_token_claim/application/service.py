# src/pm_token_claim/application/service.py
"""TokenClaimService — register wallets for a token grant and send grants.

Registration is one row per email and per wallet. process_pending() takes a
batch of pending claims under row locks, submits a token_grant transaction
for each and marks them sent, all in one DB transaction; the grants start
resolving only after that commit. A grant whose transaction fails moves the
claim to failed (see persist_resolution).
"""
import logging
import re
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.enums import TransactionKind
from src.pm_common.errors import (
    InternalError,
    InvalidEmailError,
    TokenClaimExistsError,
    TokenClaimNotFoundError,
)
from src.pm_gateway.wallet.service import format_address, normalize_address
from src.pm_token_claim.application.schemas import (
    ProcessTokenClaimsResponse,
    RegisterTokenClaimRequest,
    TokenClaimOut,
)
from src.pm_token_claim.domain.repository import TokenClaimRepositoryProtocol
from src.pm_token_claim.infrastructure.persistence import TokenClaimRepository
from src.pm_transaction.application.schemas import TransactionOut
from src.pm_transaction.application.service import (
    TransactionService,
    get_transaction_service,
)
from src.pm_transaction.domain.models import TransactionHandle, TransactionPayload

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    candidate = email.strip().lower()
    if not _EMAIL_RE.match(candidate):
        raise InvalidEmailError(email)
    return candidate


class TokenClaimService:
    def __init__(
        self,
        transactions: TransactionService,
        repo: TokenClaimRepositoryProtocol | None = None,
        grant_amount: Decimal | None = None,
    ) -> None:
        self._tx = transactions
        self._repo: TokenClaimRepositoryProtocol = repo or TokenClaimRepository()
        self._grant_amount = grant_amount or settings.TOKEN_GRANT_AMOUNT

    async def register(
        self, db: AsyncSession, body: RegisterTokenClaimRequest
    ) -> TokenClaimOut:
        email = normalize_email(body.email)
        wallet_address = normalize_address(body.wallet_address)
        try:
            existing = await self._repo.find_conflict(db, email, wallet_address)
            if existing is not None:
                raise TokenClaimExistsError("email" if existing.email == email else "wallet")
            claim = await self._repo.insert(db, email, wallet_address, self._grant_amount)
            if claim is None:
                # a concurrent registration took the email or wallet
                raise TokenClaimExistsError("email or wallet")
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Token claim registered: id=%d wallet=%s amount=%s",
            claim.id, format_address(wallet_address), claim.amount,
        )
        return TokenClaimOut.from_domain(claim)

    async def get_status(self, db: AsyncSession, email: str) -> TokenClaimOut:
        claim = await self._repo.get_by_email(db, normalize_email(email))
        if claim is None:
            raise TokenClaimNotFoundError(email)
        return TokenClaimOut.from_domain(claim)

    async def process_pending(
        self, db: AsyncSession, limit: int | None = None
    ) -> ProcessTokenClaimsResponse:
        batch_size = limit or settings.TOKEN_CLAIM_BATCH_SIZE
        sent: list[TokenClaimOut] = []
        handles: list[TransactionHandle] = []
        try:
            for claim in await self._repo.lock_pending(db, batch_size):
                handle = await self._tx.emit(
                    db,
                    TransactionKind.TOKEN_GRANT,
                    TransactionPayload(from_address=claim.wallet_address, amount=claim.amount),
                )
                updated = await self._repo.mark_sent(db, claim.id, handle.tx_hash)
                if updated is None:
                    raise InternalError(f"Token claim {claim.id} left pending state while locked")
                sent.append(TokenClaimOut.from_domain(updated))
                handles.append(handle)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        for handle in handles:
            await self._tx.start(handle)
        logger.info("Processed %d pending token claims", len(sent))
        return ProcessTokenClaimsResponse(
            processed=len(sent),
            items=sent,
            transactions=[TransactionOut.from_handle(h) for h in handles],
        )


_service: TokenClaimService | None = None


def get_token_claim_service() -> TokenClaimService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = TokenClaimService(get_transaction_service())
    return _service
