import logging

from problemlog.core.constants import ActivityAction
from problemlog.services.activity_service import ActivityService, log_activity

from .conftest import make_user


async def test_anonymous_actions_are_not_logged(session):
    await log_activity(session, None, ActivityAction.VIEW, "Dashboard")
    assert await ActivityService(session).count_logs() == 0


async def test_paging_and_filters(session):
    budi = make_user(name="Budi")
    siti = make_user(name="Siti")
    for i in range(5):
        await log_activity(session, budi, ActivityAction.VIEW, "Dashboard", f"view {i}")
    await log_activity(session, siti, ActivityAction.LOGIN, "System")

    service = ActivityService(session)
    assert await service.count_logs() == 6
    assert await service.count_logs(action_filter="view") == 5
    assert await service.count_logs(user_filter="Siti") == 1
    assert await service.count_logs(action_filter="all", user_filter="all") == 6

    page = await service.get_logs_paginated(page=2, page_size=4)
    assert len(page) == 2

    newest = (await service.get_logs_paginated(page=1, page_size=1))[0]
    assert newest.action == "LOGIN"

    assert await service.get_distinct_users() == ["Budi", "Siti"]
    assert await service.get_distinct_actions() == ["LOGIN", "VIEW"]


async def test_failed_log_is_swallowed(engine, session, caplog):
    async with engine.begin() as conn:
        await conn.exec_driver_sql("DROP TABLE activity_logs")

    with caplog.at_level(logging.WARNING, logger="problemlog.services.activity_service"):
        await log_activity(session, make_user(), ActivityAction.CREATE, "Data Aduan")

    assert "Activity log failed (CREATE Data Aduan)" in caplog.text
    assert "ActivityAction." not in caplog.text


async def test_failed_log_leaves_caller_objects_loaded(engine, session, helpdesk):
    session.add(helpdesk)
    await session.commit()
    async with engine.begin() as conn:
        await conn.exec_driver_sql("DROP TABLE activity_logs")

    await log_activity(session, helpdesk, ActivityAction.UPDATE, "Users")
    # Still readable without a reload
    assert helpdesk.__dict__["name"] == "Budi Santoso"
