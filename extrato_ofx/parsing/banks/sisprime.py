"""
Sisprime account statement extractor.

Each movement starts with a full date and prints the balance before the
movement value:

    05/03/2025 123456 DÉBITO PIX FULANO R$ 39,28 R$ 3,40

The history carries the direction ("CRÉDITO ..."); everything else is a debit.
"""
import re
from typing import List, Optional

from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..classification import rule
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..normalization import contains_any, fold, normalize_text
from ..values import br_date_to_iso

FULL_DATE = re.compile(r"\d{2}/\d{2}/\d{4}")
CURRENCY_VALUE = re.compile(r"-?R\$\s*[\d.,]+")
HEADER_CHUNKS = ("Período do extrato", "Saldo Anterior", "Data Documento")


class SisprimeExtractor(BaseExtractor):
    bank_id = "sisprime2"
    bank_name = "Sisprime"
    classification_rules = (
        rule("XFER", "PIX"),
        rule("XFER", "TED", "TRANSF"),
        rule("SRVCHG", "TARIFA", "TAR "),
        rule("INT", "IOF", "JRS", "JUROS"),
        rule("PAYMENT", "PAGAMENTO", "PAG", "CONVENIO", "PARCELA", "LIQ"),
    )

    def validate_format(self, text: str) -> bool:
        return contains_any(text, ["SISPRIME", "EXTRATO DE CONTA"]) and FULL_DATE.search(text) is not None

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text)

        dates = list(FULL_DATE.finditer(text))
        transactions = []
        for i, date_match in enumerate(dates):
            end = dates[i + 1].start() if i + 1 < len(dates) else len(text)
            chunk = text[date_match.start():end].strip()
            if contains_any(chunk, HEADER_CHUNKS):
                self._skip("header_row", raw=chunk[:80])
                continue
            txn = self._parse_chunk(date_match.group(0), chunk[10:].strip())
            if txn:
                transactions.append(txn)

        return transactions

    def _parse_chunk(self, date_str: str, rest: str) -> Optional[Transaction]:
        values = list(CURRENCY_VALUE.finditer(rest))
        if len(values) < 2:
            self._skip("no_amount", raw=rest[:80])
            return None

        # document number, then the history
        parts = rest[:values[0].start()].split()
        document = parts[0] if len(parts) >= 2 else None
        description = " ".join(parts[1:] if len(parts) >= 2 else parts)
        if not description:
            self._skip("short_description", raw=rest[:80])
            return None

        is_debit = "CREDITO" not in fold(description)
        try:
            return self._build(br_date_to_iso(date_str), description, values[1].group(0), is_debit,
                               balance=self._signed_balance(values[0].group(0)), document=document)
        except DateOutOfRange:
            self._skip("invalid_date", raw=rest[:80])
        except AmountUnparsable:
            self._skip("unparsable_amount", raw=rest[:80])
        return None
