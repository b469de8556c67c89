"""
Error taxonomy for statement conversion.

Statement-level errors (FormatMismatch, SectionNotFound, NoTransactionsFound,
TextExtractionError) propagate to the caller. Row-level errors
(DateOutOfRange, AmountUnparsable) are raised by the value helpers and
handled inside the extractors, which drop the row and keep going.
"""


class ExtractionError(Exception):
    """
    Base class for statement-level failures.

    Carries:
    - The bank id the user selected
    - Sample text that was being parsed
    - A severity ('error' aborts the file, 'warning' means partial success)
    """
    severity = "error"

    def __init__(self, message: str, bank_id: str = None, sample_text: str = None):
        self.message = message
        self.bank_id = bank_id
        self.sample_text = sample_text

        details = []
        if bank_id:
            details.append(f"Banco selecionado: {bank_id}")
        if sample_text:
            details.append(f"Amostra: {sample_text[:200]}...")

        full_message = f"{message}\n" + "\n".join(details) if details else message
        super().__init__(full_message)


class FormatMismatch(ExtractionError):
    """The statement does not look like the layout of the selected bank."""


class SectionNotFound(ExtractionError):
    """A required anchor (movements table, period header) is missing."""


class NoTransactionsFound(ExtractionError):
    """Layout recognised but no transaction rows were recovered."""
    severity = "warning"


class TextExtractionError(ExtractionError):
    """The PDF could not be opened or read."""


class RowError(ValueError):
    """Base class for recoverable, per-row problems."""


class DateOutOfRange(RowError):
    """A row date that is not a valid calendar date."""


class AmountUnparsable(RowError):
    """A monetary token that cannot be read as a Brazilian amount."""
