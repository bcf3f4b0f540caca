"""
Tests for participant notifications.

Covers:
- Dispatching drafts after a commit
- Failure isolation (logged, not raised)
- Read state per owner
"""

import pytest

from cvm_capital.models import NotificationSeverity, ParticipantKind
from cvm_capital.services import notifications
from cvm_capital.services.errors import NotFoundError
from cvm_capital.services.notifications import NotificationDraft


def _draft(owner, title="Hello", message="World"):
    return NotificationDraft(
        owner_id=owner.id,
        owner_kind=owner.kind,
        title=title,
        message=message,
        severity=NotificationSeverity.INFO,
    )


class TestDispatch:
    async def test_stores_every_draft(self, db_session, factory):
        investor = await factory.investor()
        partner = await factory.partner()

        sent = await notifications.dispatch(db_session, [_draft(investor), _draft(partner)])

        assert sent == 2
        stored = await notifications.list_notifications(
            db_session, investor.id, ParticipantKind.INVESTOR
        )
        assert [n.title for n in stored] == ["Hello"]

    async def test_nothing_to_send(self, db_session):
        assert await notifications.dispatch(db_session, []) == 0

    async def test_failure_is_swallowed_and_reported(self, db_session, factory):
        investor = await factory.investor()
        await db_session.commit()

        sent = await notifications.dispatch(db_session, [_draft(investor, title=None)])

        assert sent == 0

    async def test_notify_single(self, db_session, factory):
        partner = await factory.partner()
        assert await notifications.notify(
            db_session, partner.id, ParticipantKind.PARTNER, "Status", "Activated"
        ) is True


class TestReadState:
    async def test_mark_read(self, db_session, factory):
        investor = await factory.investor()
        await notifications.dispatch(db_session, [_draft(investor)])
        [note] = await notifications.list_notifications(
            db_session, investor.id, ParticipantKind.INVESTOR
        )

        updated = await notifications.mark_read(
            db_session, investor.id, ParticipantKind.INVESTOR, note.id
        )

        assert updated.is_read is True
        assert updated.read_at is not None
        unread = await notifications.list_notifications(
            db_session, investor.id, ParticipantKind.INVESTOR, unread_only=True
        )
        assert unread == []

    async def test_cannot_read_someone_elses(self, db_session, factory):
        owner = await factory.investor()
        other = await factory.investor()
        await notifications.dispatch(db_session, [_draft(owner)])
        [note] = await notifications.list_notifications(
            db_session, owner.id, ParticipantKind.INVESTOR
        )

        with pytest.raises(NotFoundError):
            await notifications.mark_read(db_session, other.id, ParticipantKind.INVESTOR, note.id)

    async def test_mark_all_read(self, db_session, factory):
        investor = await factory.investor()
        await notifications.dispatch(
            db_session, [_draft(investor, title="One"), _draft(investor, title="Two")]
        )

        assert await notifications.mark_all_read(
            db_session, investor.id, ParticipantKind.INVESTOR
        ) == 2
        assert await notifications.mark_all_read(
            db_session, investor.id, ParticipantKind.INVESTOR
        ) == 0
