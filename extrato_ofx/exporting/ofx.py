"""
OFX 1.02 (SGML) serializer for extracted statements.
"""
from datetime import datetime
from html import escape
from typing import Callable, List, Optional

from extrato_ofx.common.banks import get_febraban_code
from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction
from extrato_ofx.parsing.exceptions import NoTransactionsFound
from extrato_ofx.parsing.reconciliation import sort_chronologically

logger = get_logger(__name__)

Classifier = Callable[[str], Optional[str]]

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    number = abs(number)
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return sign + "".join(reversed(digits))


def make_fitid(date: str, amount: float, description: str, index: int) -> str:
    """
    Deterministic transaction id: rolling 32-bit hash of
    date + amount (2 decimals) + first 20 description chars + position,
    written in base 36 and truncated to 32 characters.
    """
    base = f"{date}{amount:.2f}{description[:20]}{index}"
    h = 0
    for ch in base:
        h = _int32(_int32(h) << 5) - h + ord(ch)
    return _to_base36(h)[:32]


class OFXWriter:
    def __init__(self, bank_id: str = "756", acct_id: str = "XXXXXX", currency: str = "BRL",
                 now: Optional[datetime] = None):
        self.bank_id = bank_id
        self.acct_id = acct_id
        self.currency = currency
        self.now = now

    def generate(self, transactions: List[Transaction], classify: Optional[Classifier] = None) -> str:
        """
        Generates a complete OFX document. Transactions are written
        oldest-first whatever their input order.
        """
        if not transactions:
            raise NoTransactionsFound("Nenhuma transação para exportar")
        ordered = sort_chronologically(transactions)
        return self._build_header() + self._build_body(ordered, classify)

    def _build_header(self) -> str:
        return """OFXHEADER:100
DATA:OFXSGML
VERSION:102
SECURITY:NONE
ENCODING:USASCII
CHARSET:1252
COMPRESSION:NONE
OLDFILEUID:NONE
NEWFILEUID:NONE

"""

    def _build_body(self, transactions: List[Transaction], classify: Optional[Classifier]) -> str:
        now_str = (self.now or datetime.now()).strftime("%Y%m%d%H%M%S")
        start_str = transactions[0].date.replace("-", "")
        end_str = transactions[-1].date.replace("-", "")

        out = []
        out.append("<OFX>")
        out.append("  <SIGNONMSGSRSV1>")
        out.append("    <SONRS>")
        out.append("      <STATUS>")
        out.append("        <CODE>0</CODE>")
        out.append("        <SEVERITY>INFO</SEVERITY>")
        out.append("      </STATUS>")
        out.append(f"      <DTSERVER>{now_str}</DTSERVER>")
        out.append("      <LANGUAGE>POR</LANGUAGE>")
        out.append("    </SONRS>")
        out.append("  </SIGNONMSGSRSV1>")
        out.append("  <BANKMSGSRSV1>")
        out.append("    <STMTTRNRS>")
        out.append("      <TRNUID>1</TRNUID>")
        out.append("      <STATUS>")
        out.append("        <CODE>0</CODE>")
        out.append("        <SEVERITY>INFO</SEVERITY>")
        out.append("      </STATUS>")
        out.append("      <STMTRS>")
        out.append(f"        <CURDEF>{self.currency}</CURDEF>")
        out.append("        <BANKACCTFROM>")
        out.append(f"          <BANKID>{self.bank_id}</BANKID>")
        out.append(f"          <ACCTID>{self.acct_id}</ACCTID>")
        out.append("          <ACCTTYPE>CHECKING</ACCTTYPE>")
        out.append("        </BANKACCTFROM>")
        out.append("        <BANKTRANLIST>")
        out.append(f"          <DTSTART>{start_str}</DTSTART>")
        out.append(f"          <DTEND>{end_str}</DTEND>")

        for index, txn in enumerate(transactions):
            out.append(self._build_transaction(txn, index, classify))

        out.append("        </BANKTRANLIST>")
        out.append("        <LEDGERBAL>")
        out.append(f"          <BALAMT>{transactions[-1].balance:.2f}</BALAMT>")
        out.append(f"          <DTASOF>{end_str}</DTASOF>")
        out.append("        </LEDGERBAL>")
        out.append("      </STMTRS>")
        out.append("    </STMTTRNRS>")
        out.append("  </BANKMSGSRSV1>")
        out.append("</OFX>")

        return "\n".join(out)

    def _build_transaction(self, txn: Transaction, index: int, classify: Optional[Classifier]) -> str:
        trn_type = classify(txn.description) if classify else None
        if not trn_type:
            trn_type = "CREDIT" if txn.is_credit else "DEBIT"

        amount = txn.signed_value
        fitid = make_fitid(txn.date, amount, txn.description, index)

        # SGML: only markup characters need escaping
        memo = escape(txn.description, quote=False)

        return f"""          <STMTTRN>
            <TRNTYPE>{trn_type}</TRNTYPE>
            <DTPOSTED>{txn.date.replace("-", "")}</DTPOSTED>
            <TRNAMT>{amount:.2f}</TRNAMT>
            <FITID>{fitid}</FITID>
            <MEMO>{memo}</MEMO>
          </STMTTRN>"""


def serialize(transactions: List[Transaction], bank_id: str, classify: Optional[Classifier] = None,
              account_id: str = "XXXXXX", now: Optional[datetime] = None) -> str:
    """
    OFX document for a bank id's statement. classify is the extractor's
    TRNTYPE function; when it returns None the type follows the direction.
    """
    writer = OFXWriter(bank_id=get_febraban_code(bank_id), acct_id=account_id, now=now)
    ofx = writer.generate(transactions, classify)
    logger.info("OFX generated", bank=bank_id, transactions=len(transactions))
    return ofx
