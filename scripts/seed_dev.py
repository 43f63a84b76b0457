from tourledger.db.engine import get_sessionmaker, make_engine
from tourledger.escrow import RandomSelector
from tourledger.models import Base
from tourledger.workflows import TourLedger


def main() -> None:
    """Reset the development database and load a small playable scenario."""
    engine = make_engine()

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    ledger = TourLedger(get_sessionmaker(engine), selector=RandomSelector.seeded(0))

    # Players
    for player_id, points in [("P1", 300), ("P2", 300), ("P3", 300), ("P4", 500), ("P5", 1000)]:
        ledger.fund(player_id, points)

    # Tournaments
    ledger.announce("1", 1000)
    ledger.announce("2", 200)

    # P5 enters tournament 1 alone; P1 enters backed by P2, P3 and P4.
    ledger.join("1", "P5")
    ledger.join("1", "P1", ["P2", "P3", "P4"])
    ledger.join("2", "P4")

    snapshot = ledger.snapshot()
    print(
        f"Seeded: balances={snapshot.total_balance} escrow={snapshot.escrow} "
        f"total={snapshot.total}"
    )
    engine.dispose()


if __name__ == "__main__":
    main()
