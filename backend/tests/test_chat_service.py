import pytest

from marketplace.database import utcnow
from marketplace.errors import Conflict, InvalidRequest, NotFound, Unauthorized
from marketplace.models.announcement import JobAnnouncement
from marketplace.models.chat import ChatRoom, Message
from marketplace.models.user import User
from marketplace.services import chat_service
from marketplace.services.chat_service import RoomFilter


def _user(db, username):
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password="not-a-real-hash",
        firstname=username,
        lastname="Test",
        created_at=utcnow(),
    )
    db.add(user)
    db.commit()
    return user


def _announcement(db, owner, role="Engineer"):
    now = utcnow()
    announcement = JobAnnouncement(
        owner_id=owner.id, role=role, company_name="Acme Corp", created_at=now, updated_at=now
    )
    db.add(announcement)
    db.commit()
    return announcement


@pytest.fixture
def world(db):
    recruiter = _user(db, "recruiter")
    applicant = _user(db, "applicant")
    outsider = _user(db, "outsider")
    announcement = _announcement(db, recruiter)
    return recruiter, applicant, outsider, announcement


class TestRoomRules:
    def test_self_chat_is_invalid_even_for_owner(self, db, world):
        recruiter, _, _, announcement = world
        with pytest.raises(InvalidRequest):
            chat_service.create_room(db, recruiter, recruiter.id, announcement.id)

    def test_self_chat_checked_before_ownership(self, db, world):
        _, applicant, _, announcement = world
        with pytest.raises(InvalidRequest):
            chat_service.create_room(db, applicant, applicant.id, announcement.id)

    def test_only_owner_creates(self, db, world):
        _, applicant, outsider, announcement = world
        with pytest.raises(Unauthorized):
            chat_service.create_room(db, outsider, applicant.id, announcement.id)

    def test_missing_applicant_and_announcement(self, db, world):
        recruiter, applicant, _, announcement = world
        with pytest.raises(NotFound):
            chat_service.create_room(db, recruiter, 9999, announcement.id)
        with pytest.raises(NotFound):
            chat_service.create_room(db, recruiter, applicant.id, 9999)

    def test_created_room_has_distinct_participants(self, db, world):
        recruiter, applicant, _, announcement = world
        room = chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        assert room.recruiter.id == recruiter.id
        assert room.applicant.id == applicant.id
        assert room.recruiter.id != room.applicant.id
        assert room.job_announcement_id == announcement.id

    def test_duplicate_triple(self, db, world):
        recruiter, applicant, _, announcement = world
        chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        with pytest.raises(Conflict):
            chat_service.create_room(db, recruiter, applicant.id, announcement.id)

    def test_get_missing_room_is_none(self, db, world):
        assert chat_service.get_room(db, 12345) is None

    def test_delete_requires_participant(self, db, world):
        recruiter, applicant, outsider, announcement = world
        room = chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        with pytest.raises(Unauthorized):
            chat_service.delete_room(db, outsider, room.id)

    def test_delete_missing_room(self, db, world):
        recruiter = world[0]
        with pytest.raises(NotFound):
            chat_service.delete_room(db, recruiter, 777)

    def test_deleting_a_room_removes_all_its_messages(self, db, world):
        recruiter, applicant, _, announcement = world
        other_announcement = _announcement(db, recruiter, role="Analyst")
        room = chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        keep = chat_service.create_room(db, recruiter, applicant.id, other_announcement.id)
        for text in ("a", "b", "c"):
            chat_service.create_message(db, recruiter, room.id, text)
        chat_service.create_message(db, applicant, keep.id, "stays")

        room_id = room.id
        chat_service.delete_room(db, applicant, room_id)

        assert db.query(ChatRoom).filter(ChatRoom.id == room_id).count() == 0
        assert db.query(Message).filter(Message.chat_room_id == room_id).count() == 0
        assert db.query(Message).filter(Message.chat_room_id == keep.id).count() == 1


class TestRoomFilters:
    def test_filters(self, db, world):
        recruiter, applicant, outsider, announcement = world
        other = _announcement(db, outsider, role="Chef")
        r1 = chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        r2 = chat_service.create_room(db, outsider, recruiter.id, other.id)

        def ids(room_filter, target=None):
            return [r.id for r in chat_service.list_rooms(db, room_filter, target)]

        assert ids(RoomFilter.ALL) == [r1.id, r2.id]
        assert ids(RoomFilter.RECRUITER, recruiter.id) == [r1.id]
        assert ids(RoomFilter.APPLICANT, recruiter.id) == [r2.id]
        assert ids(RoomFilter.MEMBER, recruiter.id) == [r1.id, r2.id]
        assert ids(RoomFilter.MEMBER, applicant.id) == [r1.id]
        assert ids(RoomFilter.ANNOUNCEMENT, other.id) == [r2.id]

    def test_filter_needs_target(self, db, world):
        with pytest.raises(ValueError):
            chat_service.list_rooms(db, RoomFilter.MEMBER)

    def test_pages_cover_the_unpaginated_listing(self, db, world):
        recruiter, _, _, announcement = world
        for i in range(7):
            candidate = _user(db, f"candidate{i}")
            chat_service.create_room(db, recruiter, candidate.id, announcement.id)

        full = [r.id for r in chat_service.list_rooms(db, RoomFilter.RECRUITER, recruiter.id)]
        collected = []
        for page in range(1, 4):
            result = chat_service.paginate_rooms(
                db, page, 3, "http://localhost:8000/api/chat/paginate/index/recruiter/chat-room",
                RoomFilter.RECRUITER, recruiter.id,
            )
            assert len(result.items) <= 3
            assert result.meta.total_items == len(full)
            collected.extend(r.id for r in result.items)
        assert collected == full


class TestMessageRules:
    def test_sender_is_participant(self, db, world):
        recruiter, applicant, outsider, announcement = world
        room = chat_service.create_room(db, recruiter, applicant.id, announcement.id)

        message = chat_service.create_message(db, applicant, room.id, "Hi!")
        assert message.sender_id == applicant.id
        assert room.has_participant(message.sender_id)

        with pytest.raises(Unauthorized):
            chat_service.create_message(db, outsider, room.id, "Hi?")

    def test_create_in_missing_room(self, db, world):
        with pytest.raises(NotFound):
            chat_service.create_message(db, world[0], 4040, "hello")

    def test_listing_requires_participant(self, db, world):
        recruiter, applicant, outsider, announcement = world
        room = chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        with pytest.raises(Unauthorized):
            chat_service.list_messages(db, outsider, room.id)
        with pytest.raises(Unauthorized):
            chat_service.paginate_messages(db, outsider, room.id, 1, 10, "http://localhost/x")

    def test_listing_is_insertion_ordered(self, db, world):
        recruiter, applicant, _, announcement = world
        room = chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        created = [
            chat_service.create_message(db, sender, room.id, f"#{i}").id
            for i, sender in enumerate([recruiter, applicant, applicant, recruiter])
        ]
        listed = chat_service.list_messages(db, applicant, room.id)
        assert [m.id for m in listed] == created

    def test_listing_ties_break_on_id(self, db, world):
        recruiter, applicant, _, announcement = world
        room = chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        stamp = utcnow()
        for text in ("first", "second", "third"):
            db.add(Message(chat_room_id=room.id, sender_id=recruiter.id, content=text, created_at=stamp))
            db.commit()
        listed = chat_service.list_messages(db, recruiter, room.id)
        assert [m.content for m in listed] == ["first", "second", "third"]

    def test_get_message(self, db, world):
        recruiter, applicant, outsider, announcement = world
        room = chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        message = chat_service.create_message(db, recruiter, room.id, "Hello")

        fetched = chat_service.get_message(db, applicant, message.id)
        assert fetched.chat_room.recruiter.id == recruiter.id
        assert fetched.sender.id == recruiter.id
        with pytest.raises(Unauthorized):
            chat_service.get_message(db, outsider, message.id)
        with pytest.raises(NotFound):
            chat_service.get_message(db, recruiter, 98765)

    def test_only_sender_deletes(self, db, world):
        recruiter, applicant, _, announcement = world
        room = chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        message = chat_service.create_message(db, recruiter, room.id, "Hello")
        message_id = message.id

        with pytest.raises(Unauthorized):
            chat_service.delete_message(db, applicant, message_id)

        removed = chat_service.delete_message(db, recruiter, message_id)
        assert removed.content == "Hello"
        assert db.query(Message).filter(Message.id == message_id).count() == 0

        with pytest.raises(NotFound):
            chat_service.delete_message(db, recruiter, message_id)

    def test_sender_deletes_even_after_leaving_room(self, db, world):
        recruiter, applicant, outsider, announcement = world
        room = chat_service.create_room(db, recruiter, applicant.id, announcement.id)
        message = chat_service.create_message(db, applicant, room.id, "bye")

        # swap the applicant out: deletion only looks at the sender
        room_row = db.query(ChatRoom).filter(ChatRoom.id == room.id).one()
        room_row.applicant_id = outsider.id
        db.commit()

        chat_service.delete_message(db, applicant, message.id)
