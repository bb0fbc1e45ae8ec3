"""CLI bootstrap for slot-settlement."""

import json
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel, Field, ValidationError

from slot_settlement.core.settings import get_settings
from slot_settlement.domain.errors import DomainError
from slot_settlement.domain.money import format_money
from slot_settlement.domain.records import ParticipantPreference, TransactionRecord
from slot_settlement.repositories.in_memory import (
    InMemoryTransactionLog,
    StaticParticipantDirectory,
)
from slot_settlement.services.ledger_builder import SlotPricing
from slot_settlement.services.query_service import SettlementQueryService

app = typer.Typer(help="CLI for slot transfer settlement.")
INPUT_FILE_OPTION = typer.Option(..., exists=True, dir_okay=False)


class ParticipantEntry(BaseModel):
    """Directory entry inside an exported JSON file."""

    opted_in: bool = True
    contact: str | None = None
    role: str | None = None
    color: str | None = None


class CalculateRequest(BaseModel):
    """Offline export: participant directory plus raw log rows."""

    participants: dict[str, ParticipantEntry] = Field(default_factory=dict)
    records: list[dict[str, Any]] = Field(default_factory=list)

    def to_preferences(self) -> dict[str, ParticipantPreference]:
        return {
            name: ParticipantPreference(
                participant_name=name,
                opted_in=entry.opted_in,
                contact=entry.contact,
                role=entry.role,
                color=entry.color,
            )
            for name, entry in self.participants.items()
        }

    def to_records(self) -> list[TransactionRecord]:
        return [TransactionRecord.from_fields(item) for item in self.records]


@app.command("healthcheck")
def healthcheck() -> None:
    """Verify that the CLI entrypoint is available."""
    typer.echo("slot-settlement is ready")


@app.command("calculate")
def calculate(input: Path = INPUT_FILE_OPTION) -> None:
    """Compute balances and payment instructions from a JSON export."""
    payload = json.loads(input.read_text(encoding="utf-8"))
    try:
        request = CalculateRequest.model_validate(payload)
        records = request.to_records()
    except ValidationError as exc:
        typer.echo(f"Invalid input: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except DomainError as exc:
        typer.echo(exc.message, err=True)
        raise typer.Exit(code=1) from exc

    service = SettlementQueryService(
        transaction_log=InMemoryTransactionLog(records),
        participant_directory=StaticParticipantDirectory(request.to_preferences()),
        pricing=SlotPricing.from_settings(get_settings()),
    )
    overview = service.get_overview()

    typer.echo("Balances")
    for balance in overview.balances:
        typer.echo(
            f"  {balance.participant_name}: {format_money(balance.credits)} "
            f"(given {balance.slots_given_away}, claimed {balance.slots_claimed}, "
            f"settled {balance.slots_already_settled})"
        )
    typer.echo("Payments")
    if not overview.instructions:
        typer.echo("  nothing to settle")
    for instruction in overview.instructions:
        typer.echo(f"  {instruction.description}")
    typer.echo(
        "Slots: "
        f"{overview.breakdown.total_slots} | "
        f"Eligible: {overview.breakdown.eligible_slots} | "
        f"Total debt: {format_money(overview.total_debt)}"
    )


def main() -> None:
    """Run the slot-settlement CLI application."""
    app()


if __name__ == "__main__":
    main()
