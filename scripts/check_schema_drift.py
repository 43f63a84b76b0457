"""Report differences between the ledger models and the live database schema.

Exit status: 0 when in sync, 1 when drift is found, 2 when the check itself fails.
"""

from __future__ import annotations

import sys

from alembic.autogenerate import compare_metadata
from alembic.runtime.migration import MigrationContext
from sqlalchemy.exc import SQLAlchemyError

from tourledger.db.engine import make_engine
from tourledger.models import Base


def main() -> int:
    engine = make_engine()
    target = engine.url.render_as_string(hide_password=True)
    try:
        with engine.connect() as connection:
            context = MigrationContext.configure(
                connection=connection,
                opts={"compare_type": True, "compare_server_default": True},
            )
            diffs = compare_metadata(context, Base.metadata)
    except SQLAlchemyError as exc:
        print(f"Schema drift check: ERROR for {target}: {exc}", file=sys.stderr)
        return 2
    finally:
        engine.dispose()

    if not diffs:
        print(f"Schema drift check: OK for {target}.")
        return 0

    print(f"Schema drift check: {len(diffs)} difference(s) for {target}:")
    for diff in diffs:
        print(f"  - {diff}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
