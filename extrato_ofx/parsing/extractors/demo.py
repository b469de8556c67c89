"""
Demonstration Extractor

Used only when the bank id is not a supported layout: the document text is
ignored and a fixed-shape sample statement is generated so the download
and preview flow can be shown end to end.
"""
import random
from datetime import date, timedelta
from typing import List

from extrato_ofx.common.models import Transaction, CREDIT, DEBIT
from ..base import BaseExtractor

DEMO_TEMPLATES = [
    ("Pagamento de salário", 5000.0, CREDIT),
    ("Supermercado", 350.5, DEBIT),
    ("Transferência recebida", 1200.0, CREDIT),
    ("Conta de luz", 180.75, DEBIT),
    ("Restaurante", 125.0, DEBIT),
    ("Farmácia", 85.3, DEBIT),
    ("Posto de gasolina", 250.0, DEBIT),
    ("PIX recebido", 500.0, CREDIT),
    ("Conta de internet", 120.0, DEBIT),
    ("Shopping", 450.8, DEBIT),
    ("Freelance - pagamento", 2500.0, CREDIT),
    ("Aluguel", 1500.0, DEBIT),
    ("Academia", 150.0, DEBIT),
    ("Netflix", 45.9, DEBIT),
    ("Spotify", 21.9, DEBIT),
    ("Uber", 35.5, DEBIT),
    ("iFood", 68.9, DEBIT),
    ("Reembolso", 200.0, CREDIT),
    ("Conta de água", 95.4, DEBIT),
    ("Mercado Livre - compra", 380.0, DEBIT),
    ("Cashback", 50.0, CREDIT),
    ("Padaria", 25.5, DEBIT),
    ("Rendimento poupança", 15.3, CREDIT),
    ("Livraria", 120.0, DEBIT),
    ("Seguro", 280.0, DEBIT),
]


class DemoExtractor(BaseExtractor):
    """
    Generates sample transactions (not production output).

    Args:
        count: Number of transactions generated
        seed: Seed of the value jitter, so output is reproducible
        start: First transaction date
        opening_balance: Balance before the first transaction
    """
    bank_id = "demo"
    bank_name = "Demonstração"

    def __init__(self, count: int = 60, seed: int = 42, start: date = date(2024, 1, 1),
                 opening_balance: float = 10000.0):
        self.count = count
        self.seed = seed
        self.start = start
        self.opening_balance = opening_balance

    def validate_format(self, text: str) -> bool:
        return True

    def extract(self, text: str) -> List[Transaction]:
        rng = random.Random(self.seed)
        balance = self.opening_balance
        transactions = []

        for i in range(self.count):
            description, base_value, direction = DEMO_TEMPLATES[i % len(DEMO_TEMPLATES)]
            value = round(base_value * (0.8 + rng.random() * 0.4), 2)
            balance += value if direction == CREDIT else -value
            if i > 24:
                description = f"{description} ({i // 25 + 1})"
            transactions.append(Transaction(
                date=(self.start + timedelta(days=i)).isoformat(),
                description=description,
                value=value,
                type=direction,
                balance=round(balance, 2),
            ))

        # most recent first
        transactions.reverse()
        return transactions
