import unittest

from tourledger.db.engine import get_sessionmaker, make_engine
from tourledger.errors import (
    ConflictError,
    InsufficientFundsError,
    InvalidArgumentError,
    NotFoundError,
)
from tourledger.escrow import RandomSelector, resolve_partners
from tourledger.models import BackerEntry, Base, JoinRecord, LeaderEntry
from tourledger.workflows import TourLedger


class JoinTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.Session = get_sessionmaker(self.engine)
        self.ledger = TourLedger(self.Session, selector=RandomSelector.seeded(7))

    def tearDown(self):
        self.engine.dispose()

    def _records(self, tournament_id):
        with self.Session() as session:
            return JoinRecord.for_tournament(session, tournament_id)

    def test_leader_and_backer_split_fee(self):
        self.ledger.fund("A", 1000)
        self.ledger.fund("B", 1000)
        self.ledger.announce("T1", 200)

        outcome = self.ledger.join("T1", "A", ["B"])

        self.assertEqual(outcome.fee, 100)
        self.assertEqual(outcome.leader_id, "A")
        self.assertEqual(outcome.partners, ["A", "B"])
        self.assertEqual(self.ledger.balance("A"), 900)
        self.assertEqual(self.ledger.balance("B"), 900)

        records = self._records("T1")
        self.assertEqual([r.entry for r in records], [LeaderEntry("A"), BackerEntry("B", "A")])
        self.assertTrue(all(r.leader_id == "A" for r in records))
        self.assertTrue(all(r.contributed_amount == 100 for r in records))

    def test_solo_leader_pays_full_deposit(self):
        self.ledger.fund("A", 1000)
        self.ledger.announce("T1", 1000)
        outcome = self.ledger.join("T1", "A")
        self.assertEqual(outcome.fee, 1000)
        self.assertEqual(self.ledger.balance("A"), 0)

    def test_fee_is_floor_divided(self):
        for player in ("A", "B", "C"):
            self.ledger.fund(player, 100)
        self.ledger.announce("T1", 100)

        outcome = self.ledger.join("T1", "A", ["B", "C"])

        self.assertEqual(outcome.fee, 33)
        for player in ("A", "B", "C"):
            self.assertEqual(self.ledger.balance(player), 67)
        self.assertEqual(self.ledger.snapshot().escrow, 99)

    def test_insufficient_leader_aborts_without_changes(self):
        self.ledger.fund("A", 50)
        self.ledger.fund("B", 1000)
        self.ledger.announce("T1", 200)

        with self.assertRaises(InsufficientFundsError) as ctx:
            self.ledger.join("T1", "A", ["B"])

        self.assertEqual(ctx.exception.player_id, "A")
        self.assertEqual(self.ledger.balance("A"), 50)
        self.assertEqual(self.ledger.balance("B"), 1000)
        self.assertEqual(self._records("T1"), [])

    def test_insufficient_last_backer_leaves_earlier_partners_untouched(self):
        self.ledger.fund("A", 1000)
        self.ledger.fund("B", 1000)
        self.ledger.fund("C", 10)
        self.ledger.announce("T1", 300)

        with self.assertRaises(InsufficientFundsError) as ctx:
            self.ledger.join("T1", "A", ["B", "C"])

        self.assertEqual(ctx.exception.player_id, "C")
        self.assertEqual(self.ledger.balance("A"), 1000)
        self.assertEqual(self.ledger.balance("B"), 1000)
        self.assertEqual(self.ledger.balance("C"), 10)
        self.assertEqual(self._records("T1"), [])

    def test_leader_cannot_join_twice(self):
        self.ledger.fund("A", 1000)
        self.ledger.announce("T1", 100)
        self.ledger.join("T1", "A")

        with self.assertRaises(ConflictError):
            self.ledger.join("T1", "A")

        self.assertEqual(self.ledger.balance("A"), 900)
        with self.Session() as session:
            self.assertEqual(JoinRecord.count_leader_entries(session, "T1"), 1)

    def test_backer_may_lead_own_group_in_same_tournament(self):
        self.ledger.fund("A", 1000)
        self.ledger.fund("B", 1000)
        self.ledger.announce("T1", 200)
        self.ledger.join("T1", "A", ["B"])

        self.ledger.join("T1", "B")

        self.assertEqual(self.ledger.balance("B"), 700)
        with self.Session() as session:
            leaders = [r.player_id for r in JoinRecord.leader_entries(session, "T1")]
        self.assertEqual(leaders, ["A", "B"])

    def test_same_leader_may_join_different_tournaments(self):
        self.ledger.fund("A", 1000)
        self.ledger.announce("T1", 100)
        self.ledger.announce("T2", 100)
        self.ledger.join("T1", "A")
        self.ledger.join("T2", "A")
        self.assertEqual(self.ledger.balance("A"), 800)

    def test_unknown_tournament(self):
        self.ledger.fund("A", 1000)
        with self.assertRaises(NotFoundError):
            self.ledger.join("missing", "A")
        self.assertEqual(self.ledger.balance("A"), 1000)

    def test_finished_tournament_rejects_joins(self):
        self.ledger.fund("A", 1000)
        self.ledger.fund("B", 1000)
        self.ledger.announce("T1", 100)
        self.ledger.join("T1", "A")
        self.ledger.result("T1", "A")

        with self.assertRaises(ConflictError):
            self.ledger.join("T1", "B")
        self.assertEqual(self.ledger.balance("B"), 1000)

    def test_unknown_backer_aborts_group(self):
        self.ledger.fund("A", 1000)
        self.ledger.announce("T1", 100)

        with self.assertRaises(NotFoundError):
            self.ledger.join("T1", "A", ["ghost"])

        self.assertEqual(self.ledger.balance("A"), 1000)
        self.assertEqual(self._records("T1"), [])

    def test_zero_deposit_join_records_zero_contribution(self):
        self.ledger.fund("A", 0)
        self.ledger.announce("free", 0)
        outcome = self.ledger.join("free", "A")
        self.assertEqual(outcome.fee, 0)
        self.assertEqual([r.contributed_amount for r in self._records("free")], [0])

    def test_empty_ids_are_rejected(self):
        self.ledger.fund("A", 100)
        self.ledger.announce("T1", 100)
        with self.assertRaises(InvalidArgumentError):
            self.ledger.join("", "A")
        with self.assertRaises(InvalidArgumentError):
            self.ledger.join("T1", "")
        with self.assertRaises(InvalidArgumentError):
            self.ledger.join("T1", "A", [""])

    def test_member_listed_twice_is_rejected(self):
        self.ledger.fund("A", 1000)
        self.ledger.fund("B", 1000)
        self.ledger.announce("T1", 300)

        with self.assertRaises(InvalidArgumentError):
            self.ledger.join("T1", "A", ["B", "B"])
        with self.assertRaises(InvalidArgumentError):
            self.ledger.join("T1", "A", ["A"])

        self.assertEqual(self.ledger.balance("A"), 1000)
        self.assertEqual(self.ledger.balance("B"), 1000)

    def test_resolve_partners_keeps_order(self):
        entries = resolve_partners("L", ["B2", "B1", "B3"])
        self.assertEqual(
            entries,
            [
                LeaderEntry("L"),
                BackerEntry("B2", "L"),
                BackerEntry("B1", "L"),
                BackerEntry("B3", "L"),
            ],
        )


if __name__ == "__main__":
    unittest.main()
