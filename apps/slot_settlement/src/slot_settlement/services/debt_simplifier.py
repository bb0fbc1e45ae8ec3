"""Greedy reduction of participant balances into pairwise payments.

Creditors are matched largest first against the most indebted participant.
Each step fully settles at least one side, so ``c`` creditors and ``d``
debtors yield at most ``c + d - 1`` instructions. This is not the global
minimum instruction count; the greedy order is kept because it is
deterministic and easy to explain to participants.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from slot_settlement.domain.money import ZERO, format_eur, quantize_money
from slot_settlement.domain.records import PreferenceMap, is_opted_in
from slot_settlement.services.ledger_builder import ParticipantBalance

SETTLED_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class PaymentInstruction:
    """One debtor-to-creditor payment."""

    from_participant: str
    to_participant: str
    amount: Decimal
    description: str

    def involves(self, participant_name: str) -> bool:
        return participant_name in (self.from_participant, self.to_participant)


@dataclass(slots=True)
class _OpenPosition:
    participant_name: str
    remaining: Decimal


def simplify(
    balances: Sequence[ParticipantBalance],
    preferences: PreferenceMap,
) -> list[PaymentInstruction]:
    """Turn balances into payment instructions without mutating the input."""

    participating = [
        balance
        for balance in balances
        if is_opted_in(balance.participant_name, preferences)
    ]
    # sorted() is stable, so ties keep their ledger order.
    creditors = [
        _OpenPosition(balance.participant_name, balance.credits)
        for balance in sorted(
            (item for item in participating if item.credits > 0),
            key=lambda item: item.credits,
            reverse=True,
        )
    ]
    debtors = [
        _OpenPosition(balance.participant_name, balance.credits)
        for balance in sorted(
            (item for item in participating if item.credits < 0),
            key=lambda item: item.credits,
        )
    ]

    instructions: list[PaymentInstruction] = []
    creditor_index = 0
    debtor_index = 0
    while creditor_index < len(creditors) and debtor_index < len(debtors):
        creditor = creditors[creditor_index]
        debtor = debtors[debtor_index]

        amount = quantize_money(min(creditor.remaining, abs(debtor.remaining)))
        if amount > ZERO:
            instructions.append(
                PaymentInstruction(
                    from_participant=debtor.participant_name,
                    to_participant=creditor.participant_name,
                    amount=amount,
                    description=(
                        f"{debtor.participant_name} owes "
                        f"{creditor.participant_name} {format_eur(amount)}"
                    ),
                )
            )

        creditor.remaining -= amount
        debtor.remaining += amount

        if creditor.remaining <= SETTLED_TOLERANCE:
            creditor_index += 1
        if debtor.remaining >= -SETTLED_TOLERANCE:
            debtor_index += 1

    return instructions


def total_instructed(instructions: Sequence[PaymentInstruction]) -> Decimal:
    """Sum of all instruction amounts."""

    return quantize_money(sum((item.amount for item in instructions), ZERO))
