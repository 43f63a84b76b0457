import unittest

from tourledger.db.engine import get_sessionmaker, make_engine
from tourledger.errors import (
    InsufficientFundsError,
    InvalidArgumentError,
    NotFoundError,
)
from tourledger.ledger import PlayerLedger
from tourledger.locks import DomainLocks
from tourledger.models import MAX_POINTS, Base, Player


class PlayerLedgerTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.Session = get_sessionmaker(self.engine)
        self.ledger = PlayerLedger(self.Session, DomainLocks())

    def tearDown(self):
        self.engine.dispose()

    def test_credit_creates_player_on_first_funding(self):
        player = self.ledger.credit("P1", 300)
        self.assertEqual(player.id, "P1")
        self.assertEqual(player.balance, 300)

        with self.Session() as session:
            self.assertEqual(Player.get(session, "P1").balance, 300)

    def test_credit_adds_to_existing_balance(self):
        self.ledger.credit("P1", 300)
        self.ledger.credit("P1", 200)
        self.assertEqual(self.ledger.get_balance("P1"), 500)

    def test_credit_zero_still_creates_player(self):
        self.ledger.credit("P1", 0)
        self.assertEqual(self.ledger.get_balance("P1"), 0)

    def test_credit_rejects_negative_amount(self):
        with self.assertRaises(InvalidArgumentError) as ctx:
            self.ledger.credit("P1", -5)
        # Callers that only know about ValueError still catch it.
        self.assertIsInstance(ctx.exception, ValueError)
        with self.assertRaises(NotFoundError):
            self.ledger.get_balance("P1")

    def test_credit_rejects_non_integer_amounts(self):
        with self.assertRaises(InvalidArgumentError):
            self.ledger.credit("P1", 1.5)  # type: ignore[arg-type]
        with self.assertRaises(InvalidArgumentError):
            self.ledger.credit("P1", True)  # type: ignore[arg-type]

    def test_credit_rejects_empty_player_id(self):
        with self.assertRaises(InvalidArgumentError):
            self.ledger.credit("", 10)

    def test_credit_rejects_amount_beyond_store_range(self):
        with self.assertRaises(InvalidArgumentError):
            self.ledger.credit("P1", MAX_POINTS + 1)
        with self.assertRaises(NotFoundError):
            self.ledger.get_balance("P1")

    def test_credit_rejects_balance_beyond_store_range(self):
        self.ledger.credit("P1", 2**62)
        self.ledger.credit("P1", 2**62 - 1)
        self.assertEqual(self.ledger.get_balance("P1"), MAX_POINTS)

        with self.assertRaises(InvalidArgumentError):
            self.ledger.credit("P1", 1)
        self.assertEqual(self.ledger.get_balance("P1"), MAX_POINTS)

    def test_debit_rejects_amount_beyond_store_range(self):
        self.ledger.credit("P1", 10)
        with self.assertRaises(InvalidArgumentError):
            self.ledger.debit("P1", MAX_POINTS + 1)
        self.assertEqual(self.ledger.get_balance("P1"), 10)

    def test_debit_subtracts(self):
        self.ledger.credit("P1", 300)
        player = self.ledger.debit("P1", 120)
        self.assertEqual(player.balance, 180)
        self.assertEqual(self.ledger.get_balance("P1"), 180)

    def test_debit_to_exactly_zero(self):
        self.ledger.credit("P1", 300)
        self.ledger.debit("P1", 300)
        self.assertEqual(self.ledger.get_balance("P1"), 0)

    def test_debit_unknown_player(self):
        with self.assertRaises(NotFoundError):
            self.ledger.debit("ghost", 1)

    def test_debit_insufficient_funds_leaves_balance(self):
        self.ledger.credit("P1", 50)
        with self.assertRaises(InsufficientFundsError) as ctx:
            self.ledger.debit("P1", 100)
        self.assertEqual(ctx.exception.player_id, "P1")
        self.assertEqual(ctx.exception.required, 100)
        self.assertEqual(ctx.exception.available, 50)
        self.assertEqual(self.ledger.get_balance("P1"), 50)

    def test_debit_rejects_negative_amount(self):
        self.ledger.credit("P1", 50)
        with self.assertRaises(InvalidArgumentError):
            self.ledger.debit("P1", -10)
        self.assertEqual(self.ledger.get_balance("P1"), 50)

    def test_get_balance_unknown_player(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.ledger.get_balance("nobody")
        self.assertIsInstance(ctx.exception, LookupError)
        self.assertEqual(ctx.exception.to_response()["error"]["code"], "not_found")

    def test_session_helpers_share_callers_transaction(self):
        self.ledger.credit("P1", 100)
        with self.Session() as session:
            PlayerLedger.debit_in(session, "P1", 40)
            PlayerLedger.credit_in(session, "P2", 40)
            self.assertEqual(PlayerLedger.balance_in(session, "P1"), 60)
            # closing without commit discards both writes

        self.assertEqual(self.ledger.get_balance("P1"), 100)
        with self.assertRaises(NotFoundError):
            self.ledger.get_balance("P2")


if __name__ == "__main__":
    unittest.main()
