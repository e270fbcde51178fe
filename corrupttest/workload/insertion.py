"""
Insertion workloads.
"""

from corrupttest.database import SQLSession
from corrupttest.domain import Table
from corrupttest.workload.base import FailpointSwitch, Workload, insert_statement


class SingleInsertion(Workload):
    """One autocommit INSERT with every mutation corrupted."""

    name = "single"
    description = "A single insertion; the failpoint applies to every mutation"
    first_application_only = False

    async def run(
        self,
        session: SQLSession,
        table: Table,
        injection: str,
        failpoints: FailpointSwitch,
    ) -> None:
        await self.enable_injection(failpoints, injection)
        await session.execute(insert_statement(table, table.new_row()))


class DoubleInsertion(Workload):
    """
    Two insertions in one transaction, only the first corrupted.

    The second row is the uncorrupted control. With every write corrupted a
    missing index entry would be missing for each row alike and go unnoticed.
    """

    name = "double"
    description = "Two insertions in one transaction; only the first is corrupted"

    async def run(
        self,
        session: SQLSession,
        table: Table,
        injection: str,
        failpoints: FailpointSwitch,
    ) -> None:
        row = table.new_row()
        await self.enable_injection(failpoints, injection)
        await session.execute(self.begin_statement)
        await session.execute(insert_statement(table, row))
        await session.execute(insert_statement(table, row.successor()))
        await session.execute("COMMIT")
