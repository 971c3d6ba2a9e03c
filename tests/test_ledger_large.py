import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from ledger import Ledger
from money import Money, to_money

# Each scenario is a list of (type, tx offset, amount) steps plus the expected
# (available, held, locked) once all of them have run.
SCENARIOS = [
    (
        [("deposit", 1, "100"), ("deposit", 2, "150"), ("deposit", 3, "250")],
        ("500", "0", False),
    ),
    (
        [("deposit", 1, "100"), ("deposit", 2, "400"), ("dispute", 1, ""), ("resolve", 1, "")],
        ("500", "0", False),
    ),
    (
        [("deposit", 1, "100"), ("deposit", 2, "400"), ("dispute", 1, ""), ("chargeback", 1, ""), ("deposit", 3, "9")],
        ("400", "0", True),
    ),
    (
        [("deposit", 1, "150"), ("deposit", 2, "250"), ("withdrawal", 3, "100"), ("dispute", 1, "")],
        ("150", "150", False),
    ),
    (
        [("deposit", 1, "100"), ("withdrawal", 2, "80"), ("dispute", 1, "")],
        ("20", "0", False),
    ),
    (
        [("deposit", 1, "0.00015"), ("deposit", 2, "0.00015"), ("withdrawal", 3, "0.0003")],
        ("0", "0", False),
    ),
    (
        [("deposit", 1, "10"), ("deposit", 1, "10"), ("withdrawal", 2, "10.0001")],
        ("10", "0", False),
    ),
]


def build_rows(num_clients):
    """Interleave every client's scenario step by step, round-robin across clients."""
    scripts = {}
    for client_id in range(1, num_clients + 1):
        steps, _ = SCENARIOS[client_id % len(SCENARIOS)]
        scripts[client_id] = [
            f"{kind}, {client_id}, {client_id * 10 + offset}, {amount}"
            for kind, offset, amount in steps
        ]

    rows = ["type, client, tx, amount"]
    depth = max(len(script) for script in scripts.values())
    for step in range(depth):
        for client_id, script in scripts.items():
            if step < len(script):
                rows.append(script[step])
    return rows


class TestLedgerLargeScale:
    def test_interleaved_scenarios(self, tmp_path):
        num_clients = 2000
        csv_file = tmp_path / "interleaved.csv"
        csv_file.write_text('\n'.join(build_rows(num_clients)))

        ledger = Ledger()
        accounts = ledger.process_file(str(csv_file))

        assert len(accounts) == num_clients
        for client_id, account in accounts.items():
            _, (available, held, locked) = SCENARIOS[client_id % len(SCENARIOS)]
            assert account.available == to_money(available), f"Client {client_id}"
            assert account.held == to_money(held), f"Client {client_id}"
            assert account.total == account.available + account.held
            assert account.locked is locked, f"Client {client_id}"

    def test_many_deposits_one_client(self, tmp_path):
        rows = ["type,client,tx,amount"]
        rows += [f"deposit,7,{tx_id},0.0001" for tx_id in range(1, 20001)]
        rows += [f"withdrawal,7,{tx_id},0.0001" for tx_id in range(20001, 30001)]
        csv_file = tmp_path / "single_client.csv"
        csv_file.write_text('\n'.join(rows))

        ledger = Ledger()
        accounts = ledger.process_file(str(csv_file))

        assert accounts[7].available == to_money("1")
        assert accounts[7].held == Money.ZERO
        assert ledger.stats.applied == 30000
        assert ledger.stats.rejected == 0
