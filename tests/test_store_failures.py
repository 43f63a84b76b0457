import unittest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from tourledger.db.engine import get_sessionmaker, make_engine
from tourledger.errors import StoreUnavailableError
from tourledger.escrow import RandomSelector
from tourledger.models import Base, JoinRecord, Player, Tournament, TournamentStatus
from tourledger.workflows import TourLedger


def _disk_error(*args, **kwargs):
    raise OperationalError("INSERT INTO joinings", {}, Exception("disk I/O error"))


class StoreFailureTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.Session = get_sessionmaker(self.engine)
        self.ledger = TourLedger(self.Session, selector=RandomSelector.seeded(1))
        self.ledger.fund("A", 1000)
        self.ledger.fund("B", 1000)
        self.ledger.announce("T1", 200)

    def tearDown(self):
        self.engine.dispose()

    def test_join_store_failure_leaves_balances_untouched(self):
        with patch.object(JoinRecord, "for_entry", side_effect=_disk_error):
            with self.assertRaises(StoreUnavailableError) as ctx:
                self.ledger.join("T1", "A", ["B"])

        self.assertIsInstance(ctx.exception.__cause__, OperationalError)
        self.assertEqual(self.ledger.balance("A"), 1000)
        self.assertEqual(self.ledger.balance("B"), 1000)
        with self.Session() as session:
            self.assertEqual(JoinRecord.for_tournament(session, "T1"), [])

        # Locks were released; the ledger keeps working.
        self.ledger.join("T1", "A", ["B"])
        self.assertEqual(self.ledger.balance("A"), 900)

    def test_fund_store_failure(self):
        with patch.object(Player, "get", side_effect=_disk_error):
            with self.assertRaises(StoreUnavailableError):
                self.ledger.fund("A", 10)
        self.assertEqual(self.ledger.balance("A"), 1000)

    def test_settlement_store_failure_keeps_tournament_open(self):
        self.ledger.join("T1", "A", ["B"])

        with patch.object(Tournament, "mark_finished", side_effect=_disk_error):
            with self.assertRaises(StoreUnavailableError):
                self.ledger.result("T1", "A")

        self.assertEqual(self.ledger.status("T1"), TournamentStatus.OPEN)
        self.assertEqual(self.ledger.balance("A"), 900)
        with self.Session() as session:
            self.assertEqual(len(JoinRecord.for_tournament(session, "T1")), 2)

    def test_error_envelope(self):
        exc = StoreUnavailableError("join failed: store unavailable")
        self.assertEqual(exc.http_status, 503)
        self.assertEqual(
            exc.to_response(),
            {
                "error": {
                    "code": "store_unavailable",
                    "message": "join failed: store unavailable",
                }
            },
        )


if __name__ == "__main__":
    unittest.main()
