"""SMS bodies (Albanian). Output must stay byte-for-byte stable: owners and tenants see these texts."""
from decimal import Decimal
from typing import Sequence

from rentdash.core.recipients import DueItem, ExpiringContract
from rentdash.core.utils import format_amount, format_date

SIGNATURE = "- Sukaj Properties"


def _amount_text(amount: Decimal | None, currency: str | None) -> str | None:
    """Return e.g. "250 EUR", or None when amount or currency is missing (zero counts as missing)."""
    if not amount or not currency:
        return None
    return f"{format_amount(amount)} {currency}"


def tenant_rent_due_body(item: DueItem) -> str:
    amount = _amount_text(item.rent_amount, item.currency)
    amount_clause = f" Shuma: {amount}." if amount else ""
    return (
        f"Përshëndetje {item.tenant_name}, ju rikujtojmë se qiraja për pronën "
        f"{item.property_name} përfundon sot.{amount_clause} "
        f"Ju lutemi të kryeni pagesën. Faleminderit!"
    )


def owner_rent_due_body(items: Sequence[DueItem]) -> str:
    count = len(items)
    if count == 1:
        intro = "Kujtesë: 1 qira përfundon sot:"
    else:
        intro = f"Kujtesë: {count} qira përfundojnë sot:"

    entries = []
    for index, item in enumerate(items, start=1):
        lines = [f"{index}. {item.property_name}", f"Qiramarrës: {item.tenant_name or 'N/A'}"]
        if item.tenant_phone:
            lines.append(f"Tel: {item.tenant_phone}")
        amount = _amount_text(item.rent_amount, item.currency)
        if amount:
            lines.append(f"Shuma: {amount}")
        entries.append("\n".join(lines))

    return f"{intro}\n\n" + "\n\n".join(entries) + f"\n\n{SIGNATURE}"


def tenant_contract_expiring_body(contract: ExpiringContract) -> str:
    return (
        f"Përshëndetje {contract.tenant_name}, ju njoftojmë se kontrata e qirasë për pronën "
        f"{contract.property_name} skadon më {format_date(contract.expiry_date)}. "
        f"Ju lutemi të na kontaktoni për rinovimin. Faleminderit!"
    )


def owner_contract_expiring_body(contracts: Sequence[ExpiringContract]) -> str:
    count = len(contracts)
    if count == 1:
        intro = "Kujtesë: 1 kontratë skadon së shpejti:"
    else:
        intro = f"Kujtesë: {count} kontrata skadojnë së shpejti:"

    entries = []
    for index, contract in enumerate(contracts, start=1):
        lines = [f"{index}. {contract.property_name}", f"Qiramarrës: {contract.tenant_name or 'N/A'}"]
        if contract.tenant_phone:
            lines.append(f"Tel: {contract.tenant_phone}")
        lines.append(f"Skadon: {format_date(contract.expiry_date)}")
        entries.append("\n".join(lines))

    return f"{intro}\n\n" + "\n\n".join(entries) + f"\n\n{SIGNATURE}"
