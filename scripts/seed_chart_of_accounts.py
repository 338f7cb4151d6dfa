"""
Seed the default chart of accounts.
Run this script once against a fresh database; codes that already exist
are left untouched.
"""

import asyncio

from app.database import async_session_maker, transaction_scope
from app.services.chart_of_accounts_service import ChartOfAccountsService


async def seed_chart_of_accounts():
    async with async_session_maker() as session:
        async with transaction_scope(session):
            created = await ChartOfAccountsService(session).seed_default_chart()
        for account in created:
            print(f'  {account.account_code:<8} {account.account_name}')
        print(f'{len(created)} accounts created')


if __name__ == '__main__':
    asyncio.run(seed_chart_of_accounts())
