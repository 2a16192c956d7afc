"""Gift exchange between accounts."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID
import uuid
import logging

from profile_economy.config import get_settings
from profile_economy.models.base import GiftPayment
from profile_economy.models.gift import Gift
from profile_economy.schemas.catalog import GiftType
from profile_economy.schemas.economy import GiftClaimResult, GiftInbox, GiftSent, GiftView
from profile_economy.schemas.effects import dump_effect
from profile_economy.services.catalog import Catalog
from profile_economy.services.effect_applier import EffectApplier
from profile_economy.services.ledger_service import AccountLedger, snapshot
from profile_economy.services.unit_of_work import run_ledger_transaction
from profile_economy.utils.datetime_helpers import ensure_utc, utc_now
from profile_economy.utils.exceptions import (
    AlreadyClaimedError,
    ForbiddenError,
    InvalidGiftTypeError,
    NotFoundError,
    SelfGiftError,
)

logger = logging.getLogger(__name__)


def gift_view(gift: Gift) -> GiftView:
    return GiftView(
        gift_id=gift.gift_id,
        gift_type=gift.gift_type,
        gift_name=gift.gift_name,
        rarity=gift.rarity,
        sender_id=gift.sender_id,
        recipient_id=gift.recipient_id,
        cost=gift.cost,
        effect=gift.effect,
        message=gift.message,
        is_claimed=gift.is_claimed,
        claimed_at=ensure_utc(gift.claimed_at),
        created_at=ensure_utc(gift.created_at),
    )


class GiftService:
    """Send and claim gifts.

    Sending debits the sender and creates an unclaimed gift. Claiming flips
    ``is_claimed`` exactly once, applies the gift's effect and pays the
    recipient a share of the gift cost in reputation.
    """

    def __init__(
        self,
        db: AsyncSession,
        catalog: Catalog,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.catalog = catalog
        self.clock = clock
        self.settings = get_settings()
        self.ledger = AccountLedger(db)
        self.effects = EffectApplier(db, clock=clock)

    def list_gift_types(self) -> tuple[GiftType, ...]:
        return self.catalog.list_gift_types()

    def claim_reward(self, cost: int) -> int:
        return cost * self.settings.gift_claim_reward_percent // 100

    async def send_gift(
        self,
        sender_id: UUID,
        recipient_id: UUID,
        gift_type: str,
        message: Optional[str] = None,
        use_free_credit: bool = False,
    ) -> GiftSent:
        """
        Send a gift, paid in reputation or with one free gift credit.

        Raises:
            SelfGiftError: sender and recipient are the same account.
            InvalidGiftTypeError: unknown gift type.
            NotFoundError: sender or recipient does not exist.
            InsufficientFundsError: not enough reputation (or no free credit).
        """
        if sender_id == recipient_id:
            raise SelfGiftError("Cannot send a gift to yourself", {"account_id": str(sender_id)})

        config = self.catalog.get_gift_type(gift_type)
        if config is None:
            raise InvalidGiftTypeError(f"Invalid gift type: {gift_type}", {"gift_type": gift_type})

        payment = GiftPayment.FREE_CREDIT if use_free_credit else GiftPayment.REPUTATION
        charge = {"free_gift_credits": 1} if use_free_credit else {"reputation": config.cost}
        now = ensure_utc(self.clock())

        async def _send() -> GiftSent:
            await self.ledger.lock_account(sender_id)
            await self.ledger.get_account(recipient_id)

            await self.ledger.debit_or_raise(sender_id, charge)

            gift = Gift(
                gift_id=uuid.uuid4(),
                sender_id=sender_id,
                recipient_id=recipient_id,
                gift_type=config.gift_type,
                gift_name=config.name,
                rarity=config.rarity,
                cost=config.cost,
                effect=dump_effect(config.effect),
                message=message,
                paid_with=payment.value,
                is_claimed=False,
                created_at=now,
            )
            self.db.add(gift)
            await self.db.flush()

            return GiftSent(
                gift_id=gift.gift_id,
                gift_type=gift.gift_type,
                recipient_id=recipient_id,
                cost=gift.cost,
                paid_with=gift.paid_with,
                sender_balance=snapshot(await self.ledger.get_account(sender_id)),
            )

        sent = await run_ledger_transaction(self.db, _send, operation="send_gift")
        logger.info(
            f"Gift sent {sender_id=} {recipient_id=} {gift_type=} gift_id={sent.gift_id} "
            f"paid_with={sent.paid_with}"
        )
        return sent

    async def claim_gift(self, gift_id: UUID, recipient_id: UUID) -> GiftClaimResult:
        """
        Claim a gift addressed to ``recipient_id``.

        Raises:
            NotFoundError: no such gift.
            ForbiddenError: gift belongs to another recipient.
            AlreadyClaimedError: the gift was claimed before (or concurrently).
            InvalidEffectError: stored effect is malformed; the gift stays unclaimed.
        """
        now = ensure_utc(self.clock())

        async def _claim() -> GiftClaimResult:
            result = await self.db.execute(
                select(Gift)
                .where(Gift.gift_id == gift_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            gift = result.scalar_one_or_none()

            if not gift:
                raise NotFoundError(f"Gift not found: {gift_id}", {"gift_id": str(gift_id)})

            if gift.recipient_id != recipient_id:
                raise ForbiddenError("Gift belongs to another account", {"gift_id": str(gift_id)})

            # Account before streak row, same order as purchase and check-in
            await self.ledger.lock_account(recipient_id)

            # The flag flip is the authority; a concurrent claimer matches zero rows
            flipped = await self.db.execute(
                update(Gift)
                .where(Gift.gift_id == gift_id, Gift.is_claimed.is_(False))
                .values(is_claimed=True, claimed_at=now)
                .execution_options(synchronize_session=False)
            )
            if flipped.rowcount != 1:
                raise AlreadyClaimedError(f"Gift already claimed: {gift_id}", {"gift_id": str(gift_id)})

            applied = await self.effects.apply(recipient_id, gift.effect)

            reward = self.claim_reward(gift.cost)
            if reward:
                await self.ledger.credit(recipient_id, "reputation", reward)

            return GiftClaimResult(
                gift_id=gift_id,
                effect=applied,
                reward=reward,
                balance=snapshot(await self.ledger.get_account(recipient_id)),
            )

        claimed = await run_ledger_transaction(self.db, _claim, operation="claim_gift")
        logger.info(
            f"Gift claimed {gift_id=} {recipient_id=} effect={claimed.effect.kind} reward={claimed.reward}"
        )
        return claimed

    async def list_gifts(self, account_id: UUID, limit: int = 50) -> GiftInbox:
        received = await self.db.execute(
            select(Gift)
            .where(Gift.recipient_id == account_id)
            .order_by(Gift.created_at.desc())
            .limit(limit)
        )
        sent = await self.db.execute(
            select(Gift)
            .where(Gift.sender_id == account_id)
            .order_by(Gift.created_at.desc())
            .limit(limit)
        )
        return GiftInbox(
            received=[gift_view(gift) for gift in received.scalars().all()],
            sent=[gift_view(gift) for gift in sent.scalars().all()],
        )
