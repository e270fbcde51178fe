"""
Cross-transaction workloads.

The first transaction writes a row, the second modifies it. These check
whether assertions catch corruption that was committed by an earlier
transaction (T2, T3) or introduced by the later one (T4).
"""

from corrupttest.database import SQLSession
from corrupttest.domain import Row, Table
from corrupttest.workload.base import (
    FailpointSwitch,
    Workload,
    delete_statement,
    insert_statement,
    update_statement,
)


class T2(Workload):
    """Corrupted insert in txn 1, update of the same row in txn 2."""

    name = "t2"
    description = "Insert (corrupted) then update in a second transaction"

    def second_statements(self, table: Table, row: Row) -> list[str]:
        return [update_statement(table, row)]

    async def insert_transaction(self, session: SQLSession, table: Table, row: Row) -> None:
        await session.execute(self.begin_statement)
        await session.execute(insert_statement(table, row))
        await session.execute("COMMIT")

    async def run(
        self,
        session: SQLSession,
        table: Table,
        injection: str,
        failpoints: FailpointSwitch,
    ) -> None:
        row = table.new_row()
        await self.enable_injection(failpoints, injection)
        await self.insert_transaction(session, table, row)
        await session.execute(self.begin_statement)
        for statement in self.second_statements(table, row):
            await session.execute(statement)
        await session.execute("COMMIT")


class T3(T2):
    """Like T2, with a delete after the update in txn 2."""

    name = "t3"
    description = "Insert (corrupted), then update and delete in a second transaction"

    def second_statements(self, table: Table, row: Row) -> list[str]:
        return [update_statement(table, row), delete_statement(table, row)]


class T4(T2):
    """Like T2, but the corruption lands on the update instead of the insert."""

    name = "t4"
    description = "Insert, then a corrupted update in a second transaction"

    async def run(
        self,
        session: SQLSession,
        table: Table,
        injection: str,
        failpoints: FailpointSwitch,
    ) -> None:
        row = table.new_row()
        await self.insert_transaction(session, table, row)
        await session.execute(self.begin_statement)
        await self.enable_injection(failpoints, injection)
        for statement in self.second_statements(table, row):
            await session.execute(statement)
        await session.execute("COMMIT")
