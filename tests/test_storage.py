import time

import pytest
from unittest.mock import AsyncMock

from models import BotState, UserSession
from storage import SessionStore


class TestSessionStore:
    def test_get_set_delete(self):
        store = SessionStore()
        session = UserSession(user_id=1)

        assert store.get(1) is None
        store.set(1, session)
        assert store.get(1) is session
        assert 1 in store
        store.delete(1)
        assert store.get(1) is None
        store.delete(1)  # deleting twice is fine

    def test_get_or_create(self):
        store = SessionStore()

        session = store.get_or_create(7)

        assert session.state == BotState.START
        assert store.get_or_create(7) is session
        assert len(store) == 1

    def test_touch_updates_activity_and_chat(self):
        store = SessionStore()
        session = store.get_or_create(1)
        session.last_activity = 0

        store.touch(1, 99)

        assert session.last_activity > 0
        assert session.chat_id == 99

    def test_touch_without_chat_keeps_previous(self):
        store = SessionStore()
        store.get_or_create(1)
        store.touch(1, 99)
        store.touch(1, None)

        assert store.get(1).chat_id == 99

    def test_touch_ignores_unknown_user(self):
        store = SessionStore()

        store.touch(1, 99)

        assert 1 not in store
        assert len(store) == 0

    def test_reset_clears_form(self):
        session = UserSession(user_id=1, state=BotState.REQUESTING_AGE)
        session.form.fio = "Ivanov Ivan"

        session.reset()

        assert session.state == BotState.START
        assert session.form.fio is None


def _add(store, user_id, chat_id, last_activity=0):
    store.set(user_id, UserSession(user_id=user_id, chat_id=chat_id,
                                   last_activity=last_activity))


class TestSweep:
    @pytest.mark.asyncio
    async def test_expired_session_deleted_and_notified_once(self):
        store = SessionStore(inactivity_timeout=1800)
        _add(store, 1, 10, last_activity=time.time() - 1801)
        notify = AsyncMock()

        expired = await store.sweep(notify)

        assert expired == 1
        assert store.get(1) is None
        notify.assert_awaited_once_with(10)

    @pytest.mark.asyncio
    async def test_fresh_sessions_survive(self):
        store = SessionStore(inactivity_timeout=1800)
        _add(store, 1, 10, last_activity=time.time() - 1799)
        notify = AsyncMock()

        assert await store.sweep(notify) == 0
        assert store.get(1) is not None
        notify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_notify_failure_does_not_stop_sweep(self):
        store = SessionStore(inactivity_timeout=60)
        for user_id in (1, 2, 3):
            _add(store, user_id, user_id * 10)
        notify = AsyncMock(side_effect=[RuntimeError("blocked"), None, None])

        expired = await store.sweep(notify, now=1000)

        assert expired == 3
        assert len(store) == 0
        assert notify.await_count == 3

    @pytest.mark.asyncio
    async def test_session_touched_during_sweep_survives(self):
        store = SessionStore(inactivity_timeout=60)
        _add(store, 1, 10)
        _add(store, 2, 20)

        async def notify(chat_id):
            # User 2 sends a message while user 1's notice is in flight
            store.touch(2, 20)

        expired = await store.sweep(notify, now=1000)

        assert expired == 1
        assert store.get(1) is None
        assert store.get(2) is not None

    @pytest.mark.asyncio
    async def test_session_without_chat_is_deleted_silently(self):
        store = SessionStore(inactivity_timeout=60)
        store.set(1, UserSession(user_id=1, last_activity=0))
        notify = AsyncMock()

        assert await store.sweep(notify, now=1000) == 1
        notify.assert_not_awaited()
