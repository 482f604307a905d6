"""Helpers shared by the store-backed tests."""


async def parse_two_rounds(services, seeded, first: dict, second: dict) -> None:
    """
    Parse every user twice: the first round sets the baseline, the second
    produces the stats gained in between.

    Args:
        first: folding user name -> (points, units) for the baseline pull
        second: folding user name -> (points, units) for the later pull
    """
    users = await services.db.get_all_users()
    for name, (points, units) in first.items():
        services.stats_client.set_total(name, points, units)
    await services.parser.parse_tc_stats_for_users_and_wait(users)

    for name, (points, units) in second.items():
        services.stats_client.set_total(name, points, units)
    await services.parser.parse_tc_stats_for_users_and_wait(users)


BASELINE = {"alice": (1_000_000, 100), "arthur": (1_000, 0), "bob": (0, 0)}
LATER = {"alice": (1_500_000, 130), "arthur": (1_500, 10), "bob": (100_000, 4)}
