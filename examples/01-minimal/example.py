import asyncio
import os

import nodegraph


class AdAccount(nodegraph.CrudObject):
    fields = ['id', 'account_id', 'name', 'currency']


class Campaign(nodegraph.CrudObject):
    fields = ['id', 'name', 'status', 'objective']
    endpoint = 'campaigns'


async def main() -> None:
    nodegraph.configure(verbose=True, log_prefix=True)
    async with nodegraph.GraphAPI.init(os.environ['GRAPH_ACCESS_TOKEN']):
        account = AdAccount({'id': os.environ['GRAPH_ACCOUNT_ID']})
        await account.read(['name', 'currency'])
        print(f"Account {account.name} in {account.currency}")

        cursor = await account.get_edge(Campaign, ['name', 'status'], {'limit': 10})
        while True:
            for campaign in cursor:
                print(f"{campaign.get_id()}: {campaign.name} ({campaign.status})")
            if not cursor.has_next():
                break
            await cursor.next()


if __name__ == '__main__':
    asyncio.run(main())
